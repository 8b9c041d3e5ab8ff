"""
PDF → PNG conversion of a resume's first page using PyMuPDF.

The result is uploaded next to the original so the UI can show a preview.
"""
from __future__ import annotations

import dataclasses
import logging
import re
from typing import Optional

import fitz  # PyMuPDF

from rankify.config import settings
from rankify.platform.types import UploadedFile

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ConversionResult:
    file: Optional[UploadedFile] = None
    error: Optional[str] = None


def image_name_for(pdf_name: str) -> str:
    """``resume.pdf`` → ``resume.png`` (case-insensitive on the extension)."""
    return re.sub(r"\.pdf$", "", pdf_name, flags=re.IGNORECASE) + ".png"


async def convert_pdf_to_image(
    file: UploadedFile, scale: Optional[float] = None
) -> ConversionResult:
    """
    Render page 1 of *file* as a PNG.

    Returns a ``ConversionResult`` whose ``file`` is ``None`` (with ``error``
    set) when the PDF cannot be opened or has no pages.
    """
    zoom = scale or settings.PDF_RENDER_SCALE
    try:
        doc = fitz.open(stream=file.content, filetype="pdf")
    except Exception as exc:
        logger.error("PDF open failed for %s: %s", file.name, exc)
        return ConversionResult(error=f"Failed to convert PDF: {exc}")

    try:
        if doc.page_count == 0:
            return ConversionResult(error="Failed to convert PDF: document has no pages")
        pix = doc[0].get_pixmap(matrix=fitz.Matrix(zoom, zoom))
        png = pix.tobytes("png")
    except Exception as exc:
        logger.error("PDF render failed for %s: %s", file.name, exc)
        return ConversionResult(error=f"Failed to convert PDF: {exc}")
    finally:
        doc.close()

    logger.info(
        "Converted %s → %s (%dx%d, %d bytes)",
        file.name,
        image_name_for(file.name),
        pix.width,
        pix.height,
        len(png),
    )
    return ConversionResult(
        file=UploadedFile(name=image_name_for(file.name), content=png, content_type="image/png")
    )
