from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "MagicPrep"
    # Uploads larger than this are rejected before extraction.
    max_upload_bytes: int = 5 * 1024 * 1024  # 5 MiB
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    ai_timeout_seconds: float = 30.0
    extraction_timeout_seconds: float = 20.0
    # Shorter texts are not worth sending to the reviewer.
    min_analysis_chars: int = 100
    lock_completed_documents: bool = True
    log_level: str = "INFO"
    api_prefix: str = "/api"
    cors_origins: list[str] = ["*"]
    host: str = "127.0.0.1"
    port: int = 3000

    @property
    def db_path(self) -> Path:
        return self.data_path / "db.sqlite"

    @property
    def uploads_dir(self) -> Path:
        return self.data_path / "uploads"

    model_config = {"env_prefix": "PREP_"}


settings = Settings()
