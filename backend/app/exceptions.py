"""
BaseDrop Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the submission workflow.
How:   Each exception class carries a user-facing message and an optional
       context dict. Global exception handlers (registered in main.py) catch
       these and return JSON error responses with the right HTTP status.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    BaseDropError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    │   └── UploadError          → 400 Bad Request ("Upload failed: ...")
    ├── NotFoundError            → 404 Not Found
    └── ProcessingError          → 500 Internal Server Error
        └── FileStorageError     → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class BaseDropError(Exception):
    """
    Base exception for all BaseDrop application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BaseDropError):
    """
    Raised when form input fails validation.

    When:    Missing link/th/image, non-integer th, malformed base_type.
    HTTP:    400 Bad Request

    Example response:
        {"message": "Link, TH, and Image are required"}
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UploadError(ValidationError):
    """
    Raised when the uploaded file itself is rejected.

    When:    Disallowed extension or MIME type, payload over the size limit.
    HTTP:    400 Bad Request, message prefixed with "Upload failed: "

    The upload path has its own handler so these rejections are reported
    the same way regardless of which check tripped.
    """

    def __init__(
        self,
        message: str = "Upload rejected",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, field="image", context=context)


class NotFoundError(BaseDropError):
    """
    Raised when a requested resource does not exist.

    When:    GET /image/{name} for a file that is not in the image directory.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ProcessingError(BaseDropError):
    """
    Raised when a submission fails for a reason the client cannot fix.

    When:    Anything unexpected after validation (I/O, serialization, bugs).
    HTTP:    500 Internal Server Error

    Response body:
        {"message": "A server error occurred", "error": "<original error text>"}
    """

    def __init__(
        self,
        message: str = "A server error occurred",
        error: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.error = error or message


class FileStorageError(ProcessingError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A server error occurred",
        error: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, error=error, context=context)
