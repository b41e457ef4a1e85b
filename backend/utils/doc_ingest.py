import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

# Longer drafts are cut; the pipeline only ever looks at the opening of a bid anyway.
DOCUMENT_CHAR_LIMIT = 100_000


def pdf_bytes_to_text(pdf_bytes: bytes, hard_limit: int = DOCUMENT_CHAR_LIMIT) -> str:
    """
    Text of an uploaded draft bid. Returns "" when the PDF cannot be read.
    """
    if not pdf_bytes:
        return ""
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        chunks = []
        for p in reader.pages:
            chunks.append(p.extract_text() or "")
        text = "\n".join(chunks).strip()
    except (PdfReadError, ValueError, OSError) as e:
        logging.warning(f"pdf_bytes_to_text: could not read uploaded PDF: {e}")
        return ""

    if len(text) > hard_limit:
        text = text[:hard_limit] + "\n[TRUNCATED]"
    return text
