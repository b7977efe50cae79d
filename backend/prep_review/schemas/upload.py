from prep_review.schemas.common import CamelModel


class StoredUpload(CamelModel):
    filename: str
    original_name: str
    path: str
    size: int
    media_type: str | None
    file_url: str


class CVAnalysis(CamelModel):
    score: int
    feedback: list[str]


class CVUploadResponse(CamelModel):
    file: StoredUpload
    file_url: str
    analysis: CVAnalysis
