import codecs
import io
import re

from pdfminer.high_level import extract_text as extract_pdf_text
from docx import Document as DocxDocument

from plagcheck.config import ALLOWED_EXTENSIONS, MAX_FILE_SIZE_MB
from ..logger import logger


class TextExtractionError(ValueError):
    pass


def allowed_file(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


def _decode_txt(content_bytes: bytes) -> str:
    if content_bytes.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return content_bytes.decode("utf-16")
    try:
        return content_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        # latin-1 maps every byte, so this is the last resort
        return content_bytes.decode("latin-1")


def extract_text_from_file(content_bytes: bytes, filename: str) -> str:
    """Return the normalized plain text of an uploaded txt, pdf or docx file."""
    if not allowed_file(filename or ""):
        raise TextExtractionError(f"Unsupported file type: {filename}")
    if len(content_bytes) > MAX_FILE_SIZE_MB * 1024 * 1024:
        raise TextExtractionError(f"File exceeds {MAX_FILE_SIZE_MB} MB")

    ext = filename.rsplit(".", 1)[1].lower()
    try:
        if ext == "txt":
            text = _decode_txt(content_bytes)
        elif ext == "pdf":
            text = extract_pdf_text(io.BytesIO(content_bytes))
        else:
            doc = DocxDocument(io.BytesIO(content_bytes))
            text = "\n".join(p.text for p in doc.paragraphs)
    except Exception as e:
        raise TextExtractionError(f"{ext.upper()} extraction failed: {e}") from e

    text = re.sub(r"\s+", " ", text).strip()
    if not text:
        raise TextExtractionError(f"No text content found in {filename}")

    logger.info(f"Extracted {len(text)} characters from {filename}")
    return text
