from pathlib import Path

from docx import Document as DocxDocument
from pypdf import PdfReader

from storygen.errors import ExtractionFailure, UnsupportedFormat


def file_extension(filename: str) -> str:
    return Path(filename or "").suffix.lower()


def _read_txt(file_path) -> str:
    return Path(file_path).read_bytes().decode("utf-8")


def _read_pdf(file_path) -> str:
    reader = PdfReader(str(file_path))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _read_docx(file_path) -> str:
    doc = DocxDocument(str(file_path))
    return "\n".join(p.text for p in doc.paragraphs)


_READERS = {
    ".txt": _read_txt,
    ".pdf": _read_pdf,
    ".doc": _read_docx,
    ".docx": _read_docx,
}

SUPPORTED_EXTENSIONS = tuple(_READERS)


def extract_text(file_path, filename: str) -> str:
    """Extract plain text from an uploaded file.

    The format is chosen from ``filename`` (the name the client sent), not
    from ``file_path``, which is usually a temporary name with no extension.
    The file is only read, never removed.
    """
    extension = file_extension(filename)
    reader = _READERS.get(extension)
    if reader is None:
        raise UnsupportedFormat(extension.lstrip("."))

    try:
        return reader(file_path)
    except Exception as e:
        raise ExtractionFailure(filename, e) from e
