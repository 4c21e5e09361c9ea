"""
BaseDrop Backend — Image Route Handler
========================================

What:  Serves stored base screenshots read-only under /image/{filename}.
How:   FileService.resolve() confines lookups to the image directory;
       FileResponse guesses the media type from the extension.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from app.schemas.submission import MessageResponse
from app.services.file_service import file_service

router = APIRouter(tags=["Images"])


@router.get(
    "/image/{filename}",
    summary="Serve a stored image",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Invalid file path", "model": MessageResponse},
        404: {"description": "Image not found", "model": MessageResponse},
    },
)
async def serve_image(filename: str) -> FileResponse:
    """Return the stored image referenced by a record's "image" field."""
    path = file_service.resolve(filename)
    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
