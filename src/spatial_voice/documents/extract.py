"""Plain-text extraction from uploaded presentation documents."""

from pathlib import Path

import fitz  # PyMuPDF
import structlog

logger = structlog.get_logger()


def _pdf_text(data: bytes) -> str:
    with fitz.open(stream=data, filetype="pdf") as doc:
        pages = [page.get_text() for page in doc]
    # Blank pages are dropped
    return "\n\n".join(text for text in pages if text.strip())


def extract_text_from_bytes(data: bytes, filename: str) -> str:
    """Extract text from an uploaded file's contents.

    PDFs yield their text layer (scanned pages without one yield nothing);
    any other file is decoded as UTF-8 text. Failures are logged and
    produce an empty string.

    Args:
        data: Raw file contents.
        filename: Original file name, used to pick the format.

    Returns:
        Extracted text, possibly empty.
    """
    try:
        if filename.lower().endswith(".pdf"):
            return _pdf_text(data)
        return data.decode("utf-8")
    except Exception as e:
        logger.warning("text_extraction_failed", filename=filename, error=str(e))
        return ""


def extract_text(path: Path) -> str:
    """Extract text from a document on disk. Unreadable files give ""."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        logger.warning("text_extraction_failed", filename=str(path), error=str(e))
        return ""
    return extract_text_from_bytes(data, Path(path).name)
