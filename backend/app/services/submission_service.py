"""
BaseDrop Backend — Submission Service (Business Logic Orchestrator)
=====================================================================

What:  Coordinates the validate → store image → append record workflow.
How:   Composes FileService (image storage) and CategoryStore (records).
Why:   Keeps the route free of storage details and owns the cleanup rules.
Who:   Called by the POST / route handler.
When:  Once per POST /, after FastAPI has parsed the multipart body.

Orchestration Flow (POST /):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────────┐
    │   Form   │───▶│  Validate   │───▶│ Store image  │───▶│ Append record│
    │  (Route) │    │  fields     │    │ (FileServ)   │    │ (CategoryStr)│
    └──────────┘    └─────────────┘    └──────────────┘    └──────────────┘

    Fields are validated before the image is read, so a rejected form never
    leaves a file behind. Once the image is stored, any later failure removes
    it again before the error propagates.
"""

import logging
from typing import Any, List, Optional

from fastapi import UploadFile

from app.exceptions import BaseDropError, ProcessingError, ValidationError
from app.schemas.submission import Author, SubmissionRecord
from app.services.file_service import file_service
from app.services.record_store import category_store

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Link, TH, and Image are required"
DEFAULT_AUTHOR_NAME = "Unknown"

# Keeps category filenames short and the per-TH lock map bounded
MAX_TH_LEVEL = 999


def normalize_base_type(value: Any) -> List[str]:
    """
    Turn the submitted base_type into a list of tags.

        None or ""          → []
        "war"               → ["war"]
        ["war", "farm"]     → ["war", "farm"]   (blank entries dropped)

    Raises:
        ValidationError: anything that is not a string or a list of strings.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, (list, tuple)):
        if not all(isinstance(item, str) for item in value):
            raise ValidationError(
                message="base_type must be a string or a list of strings",
                field="base_type",
            )
        return [item for item in value if item]
    raise ValidationError(
        message="base_type must be a string or a list of strings",
        field="base_type",
        context={"type": type(value).__name__},
    )


def parse_th(value: str) -> int:
    """Parse the TH level; it names the category file, so it must be an int in 1..MAX_TH_LEVEL."""
    try:
        th = int(value.strip())
    except ValueError:
        raise ValidationError(
            message="TH must be a positive integer",
            field="th",
            context={"value": value},
        )
    if th < 1 or th > MAX_TH_LEVEL:
        raise ValidationError(
            message="TH must be a positive integer",
            field="th",
            context={"value": value},
        )
    return th


class SubmissionService:
    """
    Business logic for base submissions.

    Error Handling Strategy:
        BaseDropError subclasses (ValidationError, UploadError,
        FileStorageError) propagate unchanged. Anything else is logged with
        its traceback and wrapped in ProcessingError, which carries the
        original message to the client.
    """

    async def submit(
        self,
        link: Optional[str],
        th: Optional[str],
        image: Optional[UploadFile],
        base_type: Any = None,
        author_name: Optional[str] = None,
        author_tag: Optional[str] = None,
    ) -> SubmissionRecord:
        """
        Validate a submission, store its image and append its record.

        Args:
            link: Layout link (required, non-blank)
            th: Town hall level as submitted (required, positive integer)
            image: Uploaded screenshot (required)
            base_type: Zero or more tags, as a string or list of strings
            author_name: Submitter name; blank → "Unknown"
            author_tag: Submitter tag; absent → ""

        Returns:
            The SubmissionRecord as written to the category file.

        Raises:
            ValidationError: missing/invalid fields (400)
            UploadError: image type or size rejected (400)
            ProcessingError: anything else (500)
        """
        # ── Step 1: Validate fields before touching the upload ───────────
        missing = (
            not (link and link.strip())
            or not (th and th.strip())
            or image is None
            or not image.filename
        )
        if missing:
            raise ValidationError(message=REQUIRED_FIELDS_MESSAGE)

        th_level = parse_th(th)
        tags = normalize_base_type(base_type)
        author = Author(
            name=(author_name or "").strip() or DEFAULT_AUTHOR_NAME,
            tag=author_tag or "",
        )

        # ── Step 2: Validate and store the image ──────────────────────────
        stored_name = await file_service.validate_and_store(image)

        # ── Step 3: Append the record ─────────────────────────────────────
        try:
            record = await category_store.append(
                th=th_level,
                link=link,
                base_type=tags,
                image=stored_name,
                author=author,
            )
        except BaseDropError:
            await file_service.cleanup_file(stored_name)
            raise
        except Exception as e:
            await file_service.cleanup_file(stored_name)
            logger.error("Unexpected error while appending record: %s", str(e), exc_info=True)
            raise ProcessingError(
                error=str(e),
                context={"th": th_level, "image": stored_name},
            )

        logger.info("Submission accepted: th=%d id=%d image=%s", th_level, record.id, stored_name)
        return record


# ── Singleton Instance ────────────────────────────────────────────────────
submission_service = SubmissionService()
