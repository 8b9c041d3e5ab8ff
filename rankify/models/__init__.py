"""Record and API schemas for Rankify."""
from rankify.models.schemas import (
    ResumeRecord,
    UserResponse,
    AuthStatusResponse,
    HealthCheckResponse,
    AnalysisStatusResponse,
    ResumeResponse,
    ResumeListResponse,
)

__all__ = [
    # Stored records
    "ResumeRecord",
    # Pydantic schemas
    "UserResponse",
    "AuthStatusResponse",
    "HealthCheckResponse",
    "AnalysisStatusResponse",
    "ResumeResponse",
    "ResumeListResponse",
]
