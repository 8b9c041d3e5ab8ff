"""
Pydantic schemas for stored records and request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List, Dict, Any, Union
from datetime import datetime


# Stored records
class ResumeRecord(BaseModel):
    """
    A resume analysis as persisted under ``resume:<id>``.

    ``feedback`` is the empty string until the AI review has been parsed, then
    the parsed feedback object.
    """

    id: str
    resume_path: str = Field(..., alias="resumePath")
    image_path: str = Field(..., alias="imagePath")
    company_name: str = Field("", alias="companyName")
    job_title: str = Field("", alias="jobTitle")
    job_description: str = Field("", alias="jobDescription")
    feedback: Union[Dict[str, Any], str] = ""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    @model_validator(mode="after")
    def _feedback_requires_uploads(self) -> "ResumeRecord":
        if self.feedback and not (self.resume_path and self.image_path):
            raise ValueError("feedback cannot be set before both files are uploaded")
        return self

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


# Auth Schemas
class UserResponse(BaseModel):
    """Schema for the signed-in platform user."""

    uid: str
    username: str
    email: Optional[str] = None


class AuthStatusResponse(BaseModel):
    """Schema for the current auth session."""

    user: Optional[UserResponse] = None
    is_authenticated: bool
    is_loading: bool
    error: Optional[str] = None


# Health Schemas
class HealthCheckResponse(BaseModel):
    """Schema for health check endpoint."""

    status: str
    platform_ready: bool
    global_error: Optional[str] = None
    is_authenticated: bool
    timestamp: datetime
    version: str = "0.1.0"


# Analysis Schemas
class AnalysisStatusResponse(BaseModel):
    """Schema for the progress of one analysis run."""

    run_id: str
    stage: str
    status_text: str
    is_running: bool
    resume_id: Optional[str] = None
    error: Optional[str] = None
    elapsed_seconds: float


class ResumeResponse(BaseModel):
    """Schema for a stored resume record."""

    id: str
    resume_path: str
    image_path: str
    company_name: str
    job_title: str
    job_description: str
    feedback: Union[Dict[str, Any], str] = ""


class ResumeListResponse(BaseModel):
    """Schema for the list of stored resume records."""

    resumes: List[ResumeResponse]
    total: int
