from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import FileResponse

from prep_review.errors import InvalidInput
from prep_review.schemas.upload import StoredUpload
from prep_review.services.upload_service import (
    get_upload_full_path,
    read_upload,
    store_upload,
    validate_upload,
)

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("", response_model=StoredUpload, status_code=201)
async def upload_file(file: UploadFile | None = File(None)):
    """Store a student's document and hand back the fileUrl used for submission."""
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    try:
        validate_upload(file.filename, file.content_type)
        content = await read_upload(file)
    except InvalidInput as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return store_upload(file.filename, content, file.content_type)


@router.get("/{filename}")
async def download_file(filename: str):
    full_path = get_upload_full_path(filename)
    if not full_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path=str(full_path), filename=full_path.name)
