"""
Best-effort plain-text extraction for submitted documents.
Dispatches on file extension, falling back to the declared media type.
Extraction never raises: failures come back as a placeholder string.
"""
import asyncio
import io
import logging
import re
import zipfile
from pathlib import Path
from xml.etree import ElementTree as ET

from pypdf import PdfReader

from prep_review.config import settings
from prep_review.services.upload_service import DOCX_MEDIA_TYPE

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "Unable to extract content from"

_MEDIA_TYPE_KINDS = {
    "application/pdf": "pdf",
    "application/x-pdf": "pdf",
    DOCX_MEDIA_TYPE: "docx",
    "application/msword": "doc",
    "application/x-tex": "tex",
    "text/x-tex": "tex",
    "text/plain": "txt",
}

_TEX_COMMENT = re.compile(r"(?<!\\)%.*$", re.MULTILINE)
_TEX_ENVIRONMENT = re.compile(r"\\(?:begin|end)\{[^{}]*\}")
_TEX_COMMAND_WITH_ARG = re.compile(r"\\[a-zA-Z]+\*?(?:\[[^\]]*\])?\{([^{}]*)\}")
_TEX_COMMAND = re.compile(r"\\[a-zA-Z]+\*?(?:\[[^\]]*\])?")
_DOC_TEXT_RUN = re.compile(rb"[\x20-\x7e\t\r\n]{4,}")


def extraction_placeholder(filename: str) -> str:
    return f"{PLACEHOLDER_PREFIX} {filename}"


def is_placeholder(text: str) -> bool:
    return text.startswith(PLACEHOLDER_PREFIX)


def detect_kind(path: Path, media_type: str | None) -> str:
    suffix = path.suffix.lower()
    if suffix in (".pdf", ".docx", ".doc", ".tex", ".txt"):
        return suffix[1:]
    return _MEDIA_TYPE_KINDS.get((media_type or "").lower(), "other")


def _read_pdf(path: Path) -> str:
    reader = PdfReader(str(path))
    pages = [page.extract_text() or "" for page in reader.pages]
    return "\n".join(pages)


def _read_docx(path: Path) -> str:
    with zipfile.ZipFile(io.BytesIO(path.read_bytes())) as zf:
        root = ET.fromstring(zf.read("word/document.xml"))

    texts: list[str] = []
    for node in root.iter():
        tag = node.tag
        if tag.endswith("}t") and node.text:
            texts.append(node.text)
        elif tag.endswith("}tab"):
            texts.append("\t")
        elif tag.endswith("}br") or tag.endswith("}cr") or tag.endswith("}p"):
            texts.append("\n")

    text = "".join(texts).replace("\r\n", "\n").replace("\r", "\n")
    return "\n".join(line.rstrip() for line in text.split("\n"))


def strip_latex(source: str) -> str:
    """Reduce LaTeX source to its readable body text."""
    body = source
    if "\\begin{document}" in body:
        body = body.split("\\begin{document}", 1)[1]
        body = body.split("\\end{document}", 1)[0]

    body = _TEX_COMMENT.sub("", body)
    body = _TEX_ENVIRONMENT.sub("", body)
    # Unwrap innermost arguments first so nested commands collapse
    previous = None
    while previous != body:
        previous = body
        body = _TEX_COMMAND_WITH_ARG.sub(r"\1", body)
    body = _TEX_COMMAND.sub("", body)
    body = body.replace("{", "").replace("}", "").replace("~", " ")

    lines = [line.strip() for line in body.splitlines()]
    return "\n".join(line for line in lines if line)


def _read_tex(path: Path) -> str:
    return strip_latex(path.read_text(encoding="utf-8", errors="ignore"))


def _read_doc(path: Path) -> str:
    # Legacy Word binaries: keep runs of printable ASCII
    runs = _DOC_TEXT_RUN.findall(path.read_bytes())
    return "\n".join(run.decode("ascii").strip() for run in runs if run.strip())


def _read_plain(path: Path) -> str:
    text = path.read_text(encoding="utf-8", errors="ignore")
    # Reject if it looks like binary garbage (low printable ratio)
    printable = sum(1 for c in text if c.isprintable() or c.isspace())
    if len(text) > 0 and printable / len(text) > 0.85:
        return text
    return ""


_READERS = {
    "pdf": _read_pdf,
    "docx": _read_docx,
    "doc": _read_doc,
    "tex": _read_tex,
    "txt": _read_plain,
    "other": _read_plain,
}


def extract_text(path: Path, media_type: str | None = None) -> str:
    """Extract readable text from a stored file. Never raises."""
    kind = detect_kind(path, media_type)
    try:
        text = _READERS[kind](path)
    except Exception as exc:
        logger.warning("Text extraction (%s) failed for %s: %s", kind, path.name, exc)
        return extraction_placeholder(path.name)
    return text.strip()


async def extract_text_async(path: Path, media_type: str | None = None, timeout: float | None = None) -> str:
    timeout = timeout if timeout is not None else settings.extraction_timeout_seconds
    try:
        return await asyncio.wait_for(asyncio.to_thread(extract_text, path, media_type), timeout)
    except asyncio.TimeoutError:
        logger.warning("Text extraction timed out after %.1fs for %s", timeout, path.name)
        return extraction_placeholder(path.name)
