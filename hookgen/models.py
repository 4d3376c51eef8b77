"""Pydantic models for the hook generator API."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    """Status of a hook video render job."""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"


class HookScript(BaseModel):
    """Spoken hook line plus the caption shown over the video."""
    hook: str = Field(..., min_length=1, description="Line the voiceover speaks")
    overlay: str = Field(..., min_length=1, description="On-screen text accompanying the hook")

    class Config:
        json_schema_extra = {
            "example": {
                "hook": "If you're still making pins from scratch, you're wasting time. Here's how I do it.",
                "overlay": "Stop making pins from scratch"
            }
        }


class ScriptResponse(BaseModel):
    """Response model for script generation."""
    script: HookScript


class JobStatusResponse(BaseModel):
    """Response model for job status."""
    job_id: str
    status: JobStatus
    progress: int = Field(ge=0, le=100, description="Progress percentage (0-100)")
    stage: Optional[str] = Field(None, description="Pipeline step currently running")
    hook: Optional[str] = Field(None, description="Spoken hook line, once known")
    overlay: Optional[str] = Field(None, description="On-screen caption, once known")
    video_url: Optional[str] = Field(None, description="URL to download the video (when complete)")
    error: Optional[str] = Field(None, description="Error message (if status is ERROR)")

    class Config:
        json_schema_extra = {
            "example": {
                "job_id": "550e8400-e29b-41d4-a716-446655440000",
                "status": "complete",
                "progress": 100,
                "hook": "This Pinterest hack should honestly be illegal.",
                "overlay": "Illegal Pinterest hack",
                "video_url": "/api/videos/550e8400-e29b-41d4-a716-446655440000"
            }
        }


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
