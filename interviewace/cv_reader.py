"""Extract plain text from an uploaded CV (PDF, DOCX or plain text)."""

import io
import logging
import os

import pdfplumber
from docx import Document

from interviewace.errors import ValidationError

logger = logging.getLogger(__name__)

PDF_TYPE = "application/pdf"
DOC_TYPE = "application/msword"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_TYPE = "text/plain"

ALLOWED_TYPES = (PDF_TYPE, DOC_TYPE, DOCX_TYPE, TEXT_TYPE)

EXTENSION_TYPES = {
    ".pdf": PDF_TYPE,
    ".doc": DOC_TYPE,
    ".docx": DOCX_TYPE,
    ".txt": TEXT_TYPE,
    ".md": TEXT_TYPE,
}


def resolve_content_type(filename: str, content_type: str | None) -> str:
    """Declared MIME type, or one guessed from the extension for generic uploads."""
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared and declared != "application/octet-stream":
        return declared
    ext = os.path.splitext(filename or "")[1].lower()
    return EXTENSION_TYPES.get(ext, declared)


def extract_text_from_pdf(data: bytes) -> str:
    text_parts = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
    return "\n\n".join(text_parts)


def extract_text_from_docx(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())


def extract_cv_text(filename: str, content_type: str | None, data: bytes) -> str:
    """Text of an uploaded CV.

    Raises:
        ValidationError: unsupported type, legacy ``.doc``, or an unreadable file.
    """
    kind = resolve_content_type(filename, content_type)
    if kind not in ALLOWED_TYPES:
        raise ValidationError.for_field("cv", f"File type {kind or 'unknown'} not allowed")
    if not data:
        raise ValidationError.for_field("cv", "File is empty")

    try:
        if kind == PDF_TYPE:
            text = extract_text_from_pdf(data)
        elif kind == DOCX_TYPE:
            text = extract_text_from_docx(data)
        elif kind == TEXT_TYPE:
            text = data.decode("utf-8", errors="replace")
        else:
            raise ValidationError.for_field("cv", "Legacy .doc files cannot be read, upload PDF or DOCX")
    except ValidationError:
        raise
    except Exception as e:
        logger.error("Failed to read CV %s (%s): %s", filename, kind, e)
        raise ValidationError.for_field("cv", "File could not be read") from e

    logger.info("Extracted %d characters from CV %s", len(text), filename)
    return text.strip()
