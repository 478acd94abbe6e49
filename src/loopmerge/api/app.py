"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from loopmerge.api.middleware import loopmerge_error_handler
from loopmerge.api.routes import download, media
from loopmerge.models.errors import LoopMergeError

VERSION = "0.1.0"

ENDPOINTS = {
    "POST /loop-video": "Loop a video a given number of times",
    "POST /merge-audio": "Merge an audio track onto a video",
    "POST /replace-audio": "Replace the audio track of a video",
    "POST /smart-loop-merge": "Loop a video to the audio's length and merge them",
    "GET /download/{filename}": "Download a produced file",
}


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Loopmerge",
        description="FFmpeg-backed video looping and audio merging service",
        version=VERSION,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handlers
    app.add_exception_handler(LoopMergeError, loopmerge_error_handler)

    # Routes
    app.include_router(media.router)
    app.include_router(download.router)

    @app.get("/")
    async def index():
        return {"message": "FFmpeg Service API", "endpoints": ENDPOINTS}

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": VERSION}

    return app


app = create_app()
