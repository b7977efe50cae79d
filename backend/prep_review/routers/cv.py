from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from prep_review.errors import InvalidInput
from prep_review.schemas.upload import CVAnalysis, CVUploadResponse
from prep_review.services.ai_reviewer import AIReviewer, get_reviewer
from prep_review.services.text_extractor import extract_text_async
from prep_review.services.upload_service import (
    get_upload_full_path,
    read_upload,
    store_upload,
    validate_upload,
)

router = APIRouter(prefix="/cv", tags=["cv"])


@router.post("/upload", response_model=CVUploadResponse)
async def upload_cv(
    cv_file: UploadFile | None = File(None, alias="cvFile"),
    reviewer: AIReviewer = Depends(get_reviewer),
):
    """Store a CV and return an immediate AI score, without creating a review record."""
    if cv_file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    try:
        validate_upload(cv_file.filename, cv_file.content_type)
        content = await read_upload(cv_file)
    except InvalidInput as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    stored = store_upload(cv_file.filename, content, cv_file.content_type)
    text = await extract_text_async(get_upload_full_path(stored.filename), stored.media_type)
    review = await reviewer.review(text, "CV/Resume")

    return CVUploadResponse(
        file=stored,
        file_url=stored.file_url,
        analysis=CVAnalysis(score=review.score, feedback=review.feedback),
    )
