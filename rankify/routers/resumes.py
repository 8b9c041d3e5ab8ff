"""
Resume upload, analysis and listing endpoints.

POST /analyze          — upload a PDF with job details; starts a background analysis run
GET  /analyze/{run_id} — progress of a run (stage + status text)
GET  /                 — all stored resume records (``resume:*``)
GET  /{resume_id}      — one stored record

All routes require a signed-in platform user.
"""
from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from rankify.config import settings
from rankify.dependencies.auth import get_current_user, get_platform
from rankify.models.schemas import (
    AnalysisStatusResponse,
    ResumeListResponse,
    ResumeRecord,
    ResumeResponse,
)
from rankify.platform.client import PlatformClient
from rankify.platform.types import PlatformUser, UploadedFile
from rankify.services.analysis import AnalysisPipeline, AnalysisRequest, AnalysisStatus
from rankify.services.analysis_manager import analysis_manager
from rankify.services.resumes import ResumeRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _status_response(run_id: str, run: AnalysisStatus) -> AnalysisStatusResponse:
    return AnalysisStatusResponse(
        run_id=run_id,
        stage=run.stage.value,
        status_text=run.text,
        is_running=analysis_manager.is_running(run_id),
        resume_id=run.resume_id,
        error=run.error,
        elapsed_seconds=run.elapsed_seconds,
    )


def _resume_response(record: ResumeRecord) -> ResumeResponse:
    return ResumeResponse(
        id=record.id,
        resume_path=record.resume_path,
        image_path=record.image_path,
        company_name=record.company_name,
        job_title=record.job_title,
        job_description=record.job_description,
        feedback=record.feedback,
    )


# ---------------------------------------------------------------------------
# Analyze
# ---------------------------------------------------------------------------

@router.post(
    "/analyze",
    response_model=AnalysisStatusResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def analyze_resume(
    file: UploadFile = File(...),
    company_name: str = Form(""),
    job_title: str = Form(""),
    job_description: str = Form(""),
    user: PlatformUser = Depends(get_current_user),
    platform: PlatformClient = Depends(get_platform),
) -> AnalysisStatusResponse:
    """
    Upload a resume PDF and start its analysis in the background.

    - Max file size: 20 MB (configurable via MAX_FILE_SIZE)
    - Poll ``GET /api/resumes/analyze/{run_id}`` for progress
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Upload must include a filename.",
        )

    file_ext = Path(file.filename).suffix.lower()
    if file_ext not in settings.SUPPORTED_FILE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Unsupported file type '{file_ext}'. "
                f"Accepted: {', '.join(settings.SUPPORTED_FILE_TYPES)}"
            ),
        )

    # Read in slices while enforcing the size limit
    chunks: List[bytes] = []
    file_size = 0
    while True:
        chunk = await file.read(1024 * 1024)   # 1 MB slices
        if not chunk:
            break
        file_size += len(chunk)
        if file_size > settings.MAX_FILE_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=(
                    f"File exceeds the {settings.MAX_FILE_SIZE // (1024 * 1024)} MB "
                    "size limit."
                ),
            )
        chunks.append(chunk)

    if file_size == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )

    resume = UploadedFile(
        name=file.filename,
        content=b"".join(chunks),
        content_type=file.content_type or "application/pdf",
    )
    request = AnalysisRequest(
        company_name=company_name,
        job_title=job_title,
        job_description=job_description,
        resume=resume,
    )

    run_id = uuid.uuid4().hex
    run = AnalysisStatus()
    pipeline = AnalysisPipeline(platform.fs, platform.ai, platform.kv)
    analysis_manager.start(run_id, pipeline.analyze(request, run), run)

    logger.info(
        "analyze_resume: run %s for %s (%s, %d bytes)",
        run_id,
        user.username,
        file.filename,
        file_size,
    )
    return _status_response(run_id, run)


@router.get("/analyze/{run_id}", response_model=AnalysisStatusResponse)
async def analysis_status(
    run_id: str,
    user: PlatformUser = Depends(get_current_user),
) -> AnalysisStatusResponse:
    run = analysis_manager.get_status(run_id)
    if run is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Analysis run {run_id} not found.",
        )
    return _status_response(run_id, run)


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------

@router.get("/", response_model=ResumeListResponse)
async def list_resumes(
    user: PlatformUser = Depends(get_current_user),
    platform: PlatformClient = Depends(get_platform),
) -> ResumeListResponse:
    records = await ResumeRepository(platform.kv).list()
    return ResumeListResponse(
        resumes=[_resume_response(r) for r in records],
        total=len(records),
    )


@router.get("/{resume_id}", response_model=ResumeResponse)
async def get_resume(
    resume_id: str,
    user: PlatformUser = Depends(get_current_user),
    platform: PlatformClient = Depends(get_platform),
) -> ResumeResponse:
    record = await ResumeRepository(platform.kv).get(resume_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Resume {resume_id} not found.",
        )
    return _resume_response(record)
