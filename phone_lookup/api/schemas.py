from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human readable error message")


class PostSummaryResponse(BaseModel):
    slug: str
    title: str
    date: Optional[str] = None
    summary: Optional[str] = None


class PostResponse(PostSummaryResponse):
    content: str = ""


class HealthResponse(BaseModel):
    status: str = Field(..., description="Service status")
    cache: str = Field(..., description="'ok' or 'unavailable'")
