"""Tests for the seven-stage resume analysis pipeline."""
import json
from typing import List

import pytest

from rankify.platform.types import AIResponse, ChatMessage, FSItem, UploadedFile
from rankify.services import analysis
from rankify.services.analysis import (
    AnalysisPipeline,
    AnalysisRequest,
    AnalysisStage,
    AnalysisStatus,
    extract_feedback_text,
    parse_feedback,
)
from rankify.services.pdf_converter import ConversionResult
from tests.fakes import SAMPLE_FEEDBACK

RESUME_ID = "0b6f6d3e-1c1b-4d84-9d0c-1f6a8e1f2a11"


async def _fake_converter(file: UploadedFile) -> ConversionResult:
    return ConversionResult(
        file=UploadedFile(name="jane-doe.png", content=b"\x89PNG", content_type="image/png")
    )


async def _broken_converter(file: UploadedFile) -> ConversionResult:
    return ConversionResult(error="Failed to convert PDF: not a PDF")


def _request() -> AnalysisRequest:
    return AnalysisRequest(
        company_name="Acme",
        job_title="Backend Engineer",
        job_description="Build Python services.",
        resume=UploadedFile(name="jane-doe.pdf", content=b"%PDF-1.7", content_type="application/pdf"),
    )


def _pipeline(platform_client, converter=_fake_converter, seen: List[str] = None):
    on_status = None
    if seen is not None:
        on_status = lambda status: seen.append(status.stage.value)  # noqa: E731
    return AnalysisPipeline(
        platform_client.fs,
        platform_client.ai,
        platform_client.kv,
        converter=converter,
        id_factory=lambda: RESUME_ID,
        on_status=on_status,
    )


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_successful_analysis_stores_feedback(platform_client, fake_platform):
    seen: List[str] = []
    status = AnalysisStatus()

    result = await _pipeline(platform_client, seen=seen).analyze(_request(), status)

    assert result.success is True
    assert status.text == analysis.STATUS_COMPLETE
    assert status.stage == AnalysisStage.COMPLETED
    assert status.resume_id == RESUME_ID
    assert seen == [
        "uploading", "converting", "uploading_image", "preparing",
        "analyzing", "parsing", "saving", "completed",
    ]

    stored = json.loads(fake_platform.kv.store[f"resume:{RESUME_ID}"])
    assert stored == {
        "id": RESUME_ID,
        "resumePath": "/alice/jane-doe.pdf",
        "imagePath": "/alice/jane-doe.png",
        "companyName": "Acme",
        "jobTitle": "Backend Engineer",
        "jobDescription": "Build Python services.",
        "feedback": SAMPLE_FEEDBACK,
    }


@pytest.mark.asyncio
async def test_prompt_mentions_job_details(platform_client, fake_platform):
    await _pipeline(platform_client).analyze(_request())

    (message,) = fake_platform.ai.last_prompt
    file_part, text_part = message.content
    assert file_part == {"type": "file", "puter_path": "/alice/jane-doe.pdf"}
    assert "Acme" in text_part["text"]
    assert "Backend Engineer" in text_part["text"]
    assert "Build Python services." in text_part["text"]


@pytest.mark.asyncio
async def test_record_with_empty_feedback_is_saved_before_inference(platform_client, fake_platform):
    snapshots = []
    original_chat = fake_platform.ai.chat

    async def _chat(prompt, options=None):
        snapshots.append(json.loads(fake_platform.kv.store[f"resume:{RESUME_ID}"]))
        return await original_chat(prompt, options)

    fake_platform.ai.chat = _chat

    await _pipeline(platform_client).analyze(_request())

    assert snapshots[0]["feedback"] == ""
    assert fake_platform.calls.index("kv.set") < fake_platform.calls.index("ai.chat")
    assert [c for c in fake_platform.calls if c in ("kv.set", "ai.chat")] == [
        "kv.set", "ai.chat", "kv.set",
    ]


# ---------------------------------------------------------------------------
# Abort paths
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_upload_failure_creates_no_record(platform_client, fake_platform):
    fake_platform.override("fs.upload", None)
    status = AnalysisStatus()

    result = await _pipeline(platform_client).analyze(_request(), status)

    assert result.success is False
    assert status.text == analysis.ERROR_UPLOAD
    assert status.stage == AnalysisStage.FAILED
    assert fake_platform.kv.store == {}
    assert "ai.chat" not in fake_platform.calls
    assert platform_client.global_error is None


@pytest.mark.asyncio
async def test_upload_without_path_creates_no_record(platform_client, fake_platform):
    fake_platform.override("fs.upload", FSItem(name="", path=""))
    status = AnalysisStatus()

    result = await _pipeline(platform_client).analyze(_request(), status)

    assert result.success is False
    assert status.text == analysis.ERROR_UPLOAD
    assert status.stage == AnalysisStage.FAILED
    assert fake_platform.kv.store == {}
    assert "ai.chat" not in fake_platform.calls


@pytest.mark.asyncio
async def test_image_upload_without_path_creates_no_record(platform_client, fake_platform):
    fake_platform.override("fs.upload", FSItem(name="jane-doe.png", path=""), on_call=2)
    status = AnalysisStatus()

    result = await _pipeline(platform_client).analyze(_request(), status)

    assert result.success is False
    assert status.text == analysis.ERROR_IMAGE_UPLOAD
    assert fake_platform.kv.store == {}
    assert "ai.chat" not in fake_platform.calls


@pytest.mark.asyncio
async def test_conversion_failure_stops_before_image_upload(platform_client, fake_platform):
    status = AnalysisStatus()

    result = await _pipeline(platform_client, converter=_broken_converter).analyze(
        _request(), status
    )

    assert result.success is False
    assert status.text == analysis.ERROR_CONVERSION
    assert fake_platform.count("fs.upload") == 1
    assert fake_platform.kv.store == {}


@pytest.mark.asyncio
async def test_image_upload_failure_keeps_uploaded_pdf(platform_client, fake_platform):
    fake_platform.fail("fs.upload", "quota exceeded", on_call=2)
    status = AnalysisStatus()

    result = await _pipeline(platform_client).analyze(_request(), status)

    assert result.success is False
    assert status.text == analysis.ERROR_IMAGE_UPLOAD
    assert "/alice/jane-doe.pdf" in fake_platform.fs.files
    assert fake_platform.kv.store == {}
    assert "ai.chat" not in fake_platform.calls


@pytest.mark.asyncio
async def test_record_save_failure_aborts_before_inference(platform_client, fake_platform):
    fake_platform.fail("kv.set", "store offline", on_call=1)
    status = AnalysisStatus()

    result = await _pipeline(platform_client).analyze(_request(), status)

    assert result.success is False
    assert status.text == analysis.ERROR_SAVE_RECORD
    assert "ai.chat" not in fake_platform.calls


@pytest.mark.asyncio
async def test_analysis_failure_leaves_record_with_empty_feedback(platform_client, fake_platform):
    fake_platform.fail("ai.chat", "model overloaded")
    status = AnalysisStatus()

    result = await _pipeline(platform_client).analyze(_request(), status)

    assert result.success is False
    assert status.text == analysis.ERROR_ANALYSIS
    assert status.resume_id == RESUME_ID
    stored = json.loads(fake_platform.kv.store[f"resume:{RESUME_ID}"])
    assert stored["feedback"] == ""
    assert fake_platform.count("kv.set") == 1


@pytest.mark.asyncio
async def test_unparseable_feedback_aborts(platform_client, fake_platform):
    fake_platform.ai.reply = "Sorry, I cannot review this document."
    status = AnalysisStatus()

    result = await _pipeline(platform_client).analyze(_request(), status)

    assert result.success is False
    assert status.text == analysis.ERROR_PARSE
    assert json.loads(fake_platform.kv.store[f"resume:{RESUME_ID}"])["feedback"] == ""
    assert fake_platform.count("kv.set") == 1


@pytest.mark.asyncio
async def test_final_save_failure_is_reported(platform_client, fake_platform):
    fake_platform.override("kv.set", False, on_call=2)
    status = AnalysisStatus()

    result = await _pipeline(platform_client).analyze(_request(), status)

    assert result.success is False
    assert status.text == analysis.ERROR_SAVE_FEEDBACK


@pytest.mark.asyncio
async def test_structured_content_reply_is_parsed(platform_client, fake_platform):
    fake_platform.ai.reply = [{"type": "text", "text": json.dumps(SAMPLE_FEEDBACK)}]

    result = await _pipeline(platform_client).analyze(_request())

    assert result.success is True
    assert result.record.feedback == SAMPLE_FEEDBACK


# ---------------------------------------------------------------------------
# Feedback helpers
# ---------------------------------------------------------------------------

def test_extract_feedback_text_variants():
    as_text = AIResponse(message=ChatMessage(role="assistant", content='{"a": 1}'))
    as_parts = AIResponse(
        message=ChatMessage(role="assistant", content=[{"type": "text", "text": '{"b": 2}'}])
    )
    empty = AIResponse(message=ChatMessage(role="assistant", content=[]))

    assert extract_feedback_text(as_text) == '{"a": 1}'
    assert extract_feedback_text(as_parts) == '{"b": 2}'
    assert extract_feedback_text(empty) == ""


def test_parse_feedback_handles_code_fences():
    fenced = "```json\n" + json.dumps(SAMPLE_FEEDBACK) + "\n```"
    assert parse_feedback(fenced) == SAMPLE_FEEDBACK


@pytest.mark.parametrize("text", ["", "not json", "[1, 2, 3]", '"just a string"'])
def test_parse_feedback_rejects_non_objects(text):
    assert parse_feedback(text) is None
