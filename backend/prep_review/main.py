import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prep_review.config import settings
from prep_review.database import init_db
from prep_review.logging_config import setup_logging
from prep_review.routers import cv, documents, uploads
from prep_review.utils.filesystem import ensure_data_dirs

logger = logging.getLogger("prep_review")

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    ensure_data_dirs()
    try:
        init_db(settings.db_path)
        logger.info("Review database ready at %s", settings.db_path)
    except Exception as exc:
        logger.error("Could not initialise review database: %s", exc)
        raise
    yield


app = FastAPI(
    title="Magic Prep Review",
    description="Document review workflow for application mentoring",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(documents.router, prefix=settings.api_prefix)
app.include_router(uploads.router, prefix=settings.api_prefix)
app.include_router(cv.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": VERSION}


def run():
    import uvicorn

    uvicorn.run("prep_review.main:app", host=settings.host, port=settings.port)
