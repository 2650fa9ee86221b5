"""
AutoApply - CV Loader

Finds the applicant's CV on disk and extracts its text for the prompts.
The same file is attached to outgoing application emails.

Requires:
- PDF: pip install pdfplumber
- DOCX: pip install python-docx
"""
from typing import List, Optional
import logging
import os

from ..config import settings

logger = logging.getLogger("autoapply.cv")

SUPPORTED_EXTENSIONS = {'.pdf', '.docx', '.txt'}
FALLBACK_FILENAMES = ["cv.pdf", "cv.docx", "cv.txt"]


class CVNotFoundError(FileNotFoundError):
    """No CV file exists in the configured directory."""
    pass


def candidate_paths(cv_dir: Optional[str] = None) -> List[str]:
    """Paths checked for a CV, most specific first."""
    directory = cv_dir or settings.cv.cv_dir
    names = [settings.cv.cv_filename] + FALLBACK_FILENAMES
    paths = []
    for name in names:
        path = os.path.join(directory, name)
        if path not in paths:
            paths.append(path)
    return paths


def find_cv_file(cv_dir: Optional[str] = None) -> Optional[str]:
    """Return the first existing CV path, or None."""
    for path in candidate_paths(cv_dir):
        logger.debug("Checking for CV: %s", path)
        if os.path.isfile(path):
            return path
    return None


def read_cv_text(file_path: str) -> str:
    """Extract plain text from a PDF, DOCX or TXT file."""
    ext = os.path.splitext(file_path)[1].lower()

    if ext == '.txt':
        with open(file_path, 'r', encoding='utf-8') as f:
            return f.read()

    elif ext == '.pdf':
        try:
            import pdfplumber
        except ImportError:
            raise ImportError(
                "PDF parsing requires pdfplumber. Install with: pip install pdfplumber"
            )
        with pdfplumber.open(file_path) as pdf:
            pages_text = []
            for page in pdf.pages:
                page_text = page.extract_text()
                if page_text:
                    pages_text.append(page_text)
            return '\n'.join(pages_text)

    elif ext == '.docx':
        try:
            from docx import Document
        except ImportError:
            raise ImportError(
                "DOCX parsing requires python-docx. Install with: pip install python-docx"
            )
        doc = Document(file_path)
        return '\n'.join(p.text for p in doc.paragraphs)

    raise ValueError(
        f"Unsupported CV format: {ext}. Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
    )


def load_cv(cv_dir: Optional[str] = None) -> str:
    """
    Load the CV text.

    Raises:
        CVNotFoundError: If none of the candidate files exist
    """
    path = find_cv_file(cv_dir)
    if path is None:
        checked = candidate_paths(cv_dir)
        logger.error("CV file not found! Checked paths: %s", checked)
        raise CVNotFoundError(
            f"CV file not found. Put your CV at one of: {', '.join(checked)}"
        )

    text = read_cv_text(path)
    logger.info("Loaded CV from %s (%d characters)", os.path.basename(path), len(text))
    return text
