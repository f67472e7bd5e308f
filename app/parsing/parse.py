from __future__ import annotations

import hashlib
from io import BytesIO
from pathlib import PurePath

from .models import ParsedDoc

EXTENSION_SOURCE_TYPES = {
    ".txt": "txt",
    ".md": "txt",
    ".pdf": "pdf",
    ".docx": "docx",
}


class UnsupportedDocumentType(ValueError):
    pass


def _compute_doc_id(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()[:16]


def _parse_txt(content: bytes) -> tuple[str, int | None, list[str]]:
    return content.decode("utf-8", errors="replace"), None, []


def _parse_pdf(content: bytes) -> tuple[str, int | None, list[str]]:
    from pypdf import PdfReader

    warnings: list[str] = []
    try:
        reader = PdfReader(BytesIO(content))
        text_parts = [(page.extract_text() or "").strip() for page in reader.pages]
    except Exception as exc:  # noqa: BLE001 - malformed PDFs are reported, not raised
        warnings.append(f"PDF parsing failed: {exc}")
        return "", None, warnings

    text_parts = [part for part in text_parts if part]
    if not text_parts:
        warnings.append("No extractable text found in PDF.")
    return "\n".join(text_parts), len(reader.pages), warnings


def _parse_docx(content: bytes) -> tuple[str, int | None, list[str]]:
    from docx import Document

    warnings: list[str] = []
    document = Document(BytesIO(content))
    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    if not paragraphs:
        warnings.append("No extractable text found in DOCX.")
    return "\n".join(paragraphs), None, warnings


_PARSERS = {
    "txt": _parse_txt,
    "pdf": _parse_pdf,
    "docx": _parse_docx,
}


def source_type_for(filename: str) -> str:
    extension = PurePath(filename or "").suffix.lower()
    source_type = EXTENSION_SOURCE_TYPES.get(extension)
    if source_type is None:
        supported = ", ".join(sorted(EXTENSION_SOURCE_TYPES))
        raise UnsupportedDocumentType(
            f"Unsupported file type '{extension or filename}'. Supported types: {supported}"
        )
    return source_type


def extract_text_from_bytes(content: bytes, filename: str) -> ParsedDoc:
    source_type = source_type_for(filename)
    text, page_count, warnings = _PARSERS[source_type](content)
    return ParsedDoc(
        doc_id=_compute_doc_id(content),
        filename=filename,
        source_type=source_type,
        text=text.strip(),
        page_count=page_count,
        parsing_warnings=warnings,
    )
