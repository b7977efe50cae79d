import hashlib
import os
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

from fastapi import UploadFile

from prep_review.config import settings
from prep_review.errors import InvalidInput
from prep_review.schemas.upload import StoredUpload
from prep_review.utils.filesystem import ensure_data_dirs, sanitize_filename

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
ALLOWED_MEDIA_TYPES = {
    "application/pdf",
    "application/msword",
    DOCX_MEDIA_TYPE,
    "application/x-tex",
    "text/x-tex",
}
REJECTED_TYPE_MESSAGE = "Only PDF, DOC, DOCX and TEX files are allowed"


def validate_upload(filename: str | None, media_type: str | None) -> None:
    """Same filter for student submissions and mentor replacement files."""
    if (media_type or "").lower() in ALLOWED_MEDIA_TYPES:
        return
    # Browsers rarely know a media type for LaTeX sources
    if (filename or "").lower().endswith(".tex"):
        return
    raise InvalidInput(REJECTED_TYPE_MESSAGE)


async def read_upload(file: UploadFile, max_bytes: int | None = None) -> bytes:
    max_bytes = max_bytes or settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise InvalidInput(f"File size cannot exceed {max_bytes // (1024 * 1024)}MB")
        chunks.append(chunk)

    content = b"".join(chunks)
    if not content:
        raise InvalidInput("Empty file")
    return content


def store_upload(filename: str, content: bytes, media_type: str | None) -> StoredUpload:
    """Store an uploaded file immutably under the uploads directory."""
    file_hash = hashlib.sha256(content).hexdigest()
    safe_name = sanitize_filename(filename or "upload")
    stored_name = f"{file_hash[:8]}_{safe_name}"

    ensure_data_dirs()
    file_path = settings.uploads_dir / stored_name
    # Same hash prefix and name means the same file was uploaded before
    if not file_path.exists():
        file_path.write_bytes(content)
        os.chmod(file_path, 0o444)

    return StoredUpload(
        filename=stored_name,
        original_name=filename or stored_name,
        path=f"uploads/{stored_name}",
        size=len(content),
        media_type=media_type,
        file_url=f"{settings.api_prefix}/uploads/{stored_name}",
    )


def get_upload_full_path(stored_name: str) -> Path:
    return settings.uploads_dir / sanitize_filename(stored_name)


def resolve_upload(file_url: str) -> Path | None:
    """Map a file URL handed out by store_upload back to the stored file, if present."""
    name = PurePosixPath(unquote(urlparse(file_url).path)).name
    if not name:
        return None
    full_path = get_upload_full_path(name)
    return full_path if full_path.is_file() else None
