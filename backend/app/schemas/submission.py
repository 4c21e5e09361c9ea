"""
BaseDrop Backend — Pydantic Record/Response Schemas
=====================================================

What:  Pydantic models for submission records and the JSON bodies the API returns.
How:   The same SubmissionRecord model is written to the category file and
       returned in the success response, so both always share one shape.
Who:   Used by CategoryStore (persistence), SubmissionService and route handlers.

Record layout (one element of base/baseth<N>.json):
    {
        "id": 3,
        "link": "https://link.clashofclans.com/en?action=OpenLayout&id=...",
        "th": 12,
        "base_type": ["war", "anti-3-star"],
        "image": "1718035200000-482913377.png",
        "author": {"name": "Chief", "tag": "#2PP"}
    }
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Stored Records — What lands in the category files
# ══════════════════════════════════════════════════════════════════════════


class Author(BaseModel):
    """Who submitted the base. Both fields are free text."""
    name: str = Field(default="Unknown", description="Display name of the submitter")
    tag: str = Field(default="", description="Player tag of the submitter")


class SubmissionRecord(BaseModel):
    """
    One submission as stored in its category file.

    Field order here is the key order on disk and in responses.
    """
    id: int = Field(description="Sequential id, unique within its category file")
    link: str = Field(min_length=1, description="Layout link supplied by the submitter")
    th: int = Field(description="Town hall level; selects the category file")
    base_type: List[str] = Field(
        default_factory=list,
        description="Zero or more tags, in submission order",
    )
    image: Optional[str] = Field(
        default=None,
        description="Generated filename of the stored image (served under /image)",
    )
    author: Author = Field(default_factory=Author)


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class SubmissionResponse(BaseModel):
    """Returned by POST / with HTTP 200 after the record is appended."""
    message: str = Field(default="Upload successful")
    data: SubmissionRecord = Field(description="The record exactly as stored")


class MessageResponse(BaseModel):
    """Body of every 4xx response: a single human-readable message."""
    message: str = Field(description="Human-readable error description")


class ServerErrorResponse(BaseModel):
    """Body of every 5xx response: message plus the raw error text."""
    message: str = Field(description="Human-readable error description")
    error: str = Field(description="Original error message")


class HealthResponse(BaseModel):
    """
    Health check response.

    Status is "healthy" only when both storage directories exist and are
    writable; a service that cannot write either of them cannot accept a
    single submission.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    image_dir: str = Field(description="Image directory status: writable, unavailable")
    base_dir: str = Field(description="Category directory status: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
