"""
Resume analysis pipeline.

Public API
----------
AnalysisPipeline.analyze(request, status=None) -> AnalysisResult

Stages (strictly sequential, each one gated on the previous one's success)
-------------------------------------------------------------------------
1. Upload the original PDF.
2. Render its first page to PNG.
3. Upload the PNG.
4. Create the resume record with empty feedback and persist it.
5. Ask the model for feedback on the uploaded PDF.
6. Extract the reply text and parse it as JSON.
7. Persist the record again with the parsed feedback.

A failed stage stops the run and leaves ``status.text`` holding that stage's
error string.  Nothing done by earlier stages is undone: an uploaded file
without a record, or a record with empty feedback, are valid end states.
Failures are reported only through the run's status, never through the
platform client's global error channel.
"""
from __future__ import annotations

import dataclasses
import enum
import json
import logging
import re
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional

from rankify.models.schemas import ResumeRecord
from rankify.platform.files import FileStore
from rankify.platform.inference import InferenceClient
from rankify.platform.kv import KeyValueStore
from rankify.platform.types import AIResponse, UploadedFile
from rankify.services.pdf_converter import ConversionResult, convert_pdf_to_image
from rankify.services.prompts import prepare_instructions
from rankify.services.resumes import ResumeRepository

logger = logging.getLogger(__name__)

STATUS_UPLOADING = "Uploading the file..."
STATUS_CONVERTING = "Converting to image..."
STATUS_UPLOADING_IMAGE = "Uploading the image..."
STATUS_PREPARING = "Preparing data..."
STATUS_ANALYZING = "Analyzing..."
STATUS_COMPLETE = "Analysis complete, redirecting..."

ERROR_UPLOAD = "Error: Failed to upload file"
ERROR_CONVERSION = "Error: Failed to convert PDF to image"
ERROR_IMAGE_UPLOAD = "Error: Failed to upload image"
ERROR_SAVE_RECORD = "Error: Failed to save resume"
ERROR_ANALYSIS = "Error: Failed to analyze resume"
ERROR_PARSE = "Error: Failed to parse feedback"
ERROR_SAVE_FEEDBACK = "Error: Failed to save feedback"


# ---------------------------------------------------------------------------
# Stage enum and run status
# ---------------------------------------------------------------------------

class AnalysisStage(str, enum.Enum):
    QUEUED = "queued"
    UPLOADING = "uploading"
    CONVERTING = "converting"
    UPLOADING_IMAGE = "uploading_image"
    PREPARING = "preparing"
    ANALYZING = "analyzing"
    PARSING = "parsing"
    SAVING = "saving"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclasses.dataclass
class AnalysisStatus:
    """Mutable progress of one run, shared with whoever is polling it."""

    stage: AnalysisStage = AnalysisStage.QUEUED
    text: str = ""
    resume_id: Optional[str] = None
    error: Optional[str] = None
    started_at: float = dataclasses.field(default_factory=time.monotonic)
    completed_at: Optional[float] = None

    @property
    def elapsed_seconds(self) -> float:
        end = self.completed_at if self.completed_at else time.monotonic()
        return round(end - self.started_at, 2)


@dataclasses.dataclass
class AnalysisRequest:
    company_name: str
    job_title: str
    job_description: str
    resume: UploadedFile


@dataclasses.dataclass
class AnalysisResult:
    success: bool
    status_text: str
    record: Optional[ResumeRecord] = None


Converter = Callable[[UploadedFile], Awaitable[ConversionResult]]
StatusCallback = Callable[[AnalysisStatus], None]


# ---------------------------------------------------------------------------
# Feedback extraction
# ---------------------------------------------------------------------------

def extract_feedback_text(response: AIResponse) -> str:
    """Reply text: the content string, or the first content part's ``text``."""
    content = response.message.content
    if isinstance(content, str):
        return content
    if content:
        first = content[0]
        if isinstance(first, dict):
            return str(first.get("text", ""))
        return str(first)
    return ""


def parse_feedback(text: str) -> Optional[Dict[str, Any]]:
    """Parse the model's reply as a JSON object; ``None`` if it is not one."""
    stripped = re.sub(r"^```(?:json)?\s*\n?", "", text.strip(), flags=re.IGNORECASE)
    stripped = re.sub(r"\n?```\s*$", "", stripped)
    try:
        parsed = json.loads(stripped)
    except (json.JSONDecodeError, ValueError):
        logger.warning("parse_feedback: reply is not valid JSON. Preview: %s", text[:200])
        return None
    if not isinstance(parsed, dict):
        logger.warning("parse_feedback: expected a JSON object, got %s", type(parsed).__name__)
        return None
    return parsed


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class AnalysisPipeline:
    """
    Runs the seven stages against the platform slices.

    The converter and the id factory are injectable; by default the PDF is
    rendered with PyMuPDF and record ids are random UUIDs.
    """

    def __init__(
        self,
        fs: FileStore,
        ai: InferenceClient,
        kv: KeyValueStore,
        converter: Optional[Converter] = None,
        id_factory: Optional[Callable[[], str]] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> None:
        self._fs = fs
        self._ai = ai
        self._resumes = ResumeRepository(kv)
        self._convert = converter or convert_pdf_to_image
        self._new_id = id_factory or (lambda: str(uuid.uuid4()))
        self._on_status = on_status

    async def analyze(
        self, request: AnalysisRequest, status: Optional[AnalysisStatus] = None
    ) -> AnalysisResult:
        status = status or AnalysisStatus()
        t0 = time.monotonic()

        # Stage 1: upload the PDF
        self._report(status, AnalysisStage.UPLOADING, STATUS_UPLOADING)
        uploaded = await self._fs.upload([request.resume])
        if uploaded is None or not uploaded.path:
            return self._fail(status, ERROR_UPLOAD)

        # Stage 2: render to PNG
        self._report(status, AnalysisStage.CONVERTING, STATUS_CONVERTING)
        conversion = await self._convert(request.resume)
        if not conversion.file:
            if conversion.error:
                logger.warning("Conversion error: %s", conversion.error)
            return self._fail(status, ERROR_CONVERSION)

        # Stage 3: upload the PNG
        self._report(status, AnalysisStage.UPLOADING_IMAGE, STATUS_UPLOADING_IMAGE)
        uploaded_image = await self._fs.upload([conversion.file])
        if uploaded_image is None or not uploaded_image.path:
            return self._fail(status, ERROR_IMAGE_UPLOAD)

        # Stage 4: persist the record with empty feedback
        self._report(status, AnalysisStage.PREPARING, STATUS_PREPARING)
        record = ResumeRecord(
            id=self._new_id(),
            resume_path=uploaded.path,
            image_path=uploaded_image.path,
            company_name=request.company_name,
            job_title=request.job_title,
            job_description=request.job_description,
            feedback="",
        )
        status.resume_id = record.id
        if not await self._resumes.save(record):
            return self._fail(status, ERROR_SAVE_RECORD)

        # Stage 5: ask for feedback on the uploaded PDF
        self._report(status, AnalysisStage.ANALYZING, STATUS_ANALYZING)
        response = await self._ai.feedback(
            uploaded.path,
            prepare_instructions(
                request.company_name, request.job_title, request.job_description
            ),
        )
        if not response:
            return self._fail(status, ERROR_ANALYSIS)

        # Stage 6: parse the reply
        self._report(status, AnalysisStage.PARSING)
        feedback = parse_feedback(extract_feedback_text(response))
        if feedback is None:
            return self._fail(status, ERROR_PARSE)

        # Stage 7: persist the completed record
        self._report(status, AnalysisStage.SAVING)
        record.feedback = feedback
        if not await self._resumes.save(record):
            return self._fail(status, ERROR_SAVE_FEEDBACK)

        self._report(status, AnalysisStage.COMPLETED, STATUS_COMPLETE)
        status.completed_at = time.monotonic()
        logger.info(
            "Analysis of %s complete in %.2fs: resume id=%s, overall score=%s",
            request.resume.name,
            time.monotonic() - t0,
            record.id,
            feedback.get("overallScore"),
        )
        return AnalysisResult(success=True, status_text=status.text, record=record)

    # ------------------------------------------------------------------
    # Status helpers
    # ------------------------------------------------------------------

    def _report(
        self, status: AnalysisStatus, stage: AnalysisStage, text: Optional[str] = None
    ) -> None:
        status.stage = stage
        if text is not None:
            status.text = text
        logger.info("Analysis stage %s: %s", stage.value, status.text)
        if self._on_status is not None:
            self._on_status(status)

    def _fail(self, status: AnalysisStatus, message: str) -> AnalysisResult:
        status.error = message
        status.completed_at = time.monotonic()
        self._report(status, AnalysisStage.FAILED, message)
        logger.warning(
            "Analysis aborted (resume id=%s): %s", status.resume_id, message
        )
        return AnalysisResult(success=False, status_text=message)
