import io
import re

import pdfplumber

_BLANK_LINES_RE = re.compile(r"\n{3,}")


def extract_text(pdf_bytes: bytes) -> str:
    """Extract resume text from a PDF, one page after another."""
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(pages)).strip()
