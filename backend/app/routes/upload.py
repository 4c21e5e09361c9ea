"""
BaseDrop Backend — Submission Route Handlers
==============================================

What:  GET / renders the submission form; POST / accepts a submission.
How:   FastAPI extracts the multipart fields, SubmissionService does the rest.
Why:   HTTP concerns stay here; validation and storage live in services.
Who:   Called by the form in templates/index.html (or any multipart client).

Request Flow (POST /):
    1. Client sends multipart/form-data: link, th, base_type (0+),
       author[name], author[tag], image
    2. SubmissionService validates fields, stores the image, appends the record
    3. Return 200 with {"message", "data": <record>}
    4. On error: global exception handlers format the JSON response
"""

import logging
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.schemas.submission import MessageResponse, ServerErrorResponse, SubmissionResponse
from app.services.file_service import ALLOWED_EXTENSIONS
from app.services.submission_service import submission_service

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter(tags=["Submissions"])


@router.get(
    "/",
    response_class=HTMLResponse,
    summary="Submission form",
)
async def submission_form(request: Request) -> HTMLResponse:
    """Render the HTML form that posts back to POST /."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {"accept": ",".join(sorted(ALLOWED_EXTENSIONS))},
    )


@router.post(
    "/",
    response_model=SubmissionResponse,
    responses={
        200: {"description": "Record appended", "model": SubmissionResponse},
        400: {"description": "Missing fields, bad file type or size", "model": MessageResponse},
        500: {"description": "Server error", "model": ServerErrorResponse},
    },
    summary="Submit a base layout",
    description=(
        "Upload a base screenshot (jpg, jpeg, png, gif, webp, max 5MB) with its layout "
        "link and town hall level. The record is appended to base/baseth<th>.json."
    ),
)
async def submit_base(
    link: Optional[str] = Form(default=None, description="Layout link"),
    th: Optional[str] = Form(default=None, description="Town hall level"),
    base_type: Optional[List[str]] = Form(default=None, description="Zero or more tags"),
    author_name: Optional[str] = Form(default=None, alias="author[name]"),
    author_tag: Optional[str] = Form(default=None, alias="author[tag]"),
    image: Optional[UploadFile] = File(default=None, description="Base screenshot"),
) -> SubmissionResponse:
    """
    Accept one submission.

    Error responses (handled by global exception handlers):
        HTTP 400: Missing/invalid fields (ValidationError)
        HTTP 400: Image rejected (UploadError), "Upload failed: ..."
        HTTP 500: Anything else (ProcessingError / unexpected)
    """
    logger.info(
        "Received submission: th=%s, image=%s",
        th,
        image.filename if image is not None else None,
    )

    try:
        record = await submission_service.submit(
            link=link,
            th=th,
            image=image,
            base_type=base_type,
            author_name=author_name,
            author_tag=author_tag,
        )
    finally:
        if image is not None:
            await image.close()

    return SubmissionResponse(data=record)
