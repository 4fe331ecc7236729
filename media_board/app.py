"""
FastAPI application entry point for the media board backend.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from media_board.board import BoardState
from media_board.config import Settings, get_settings
from media_board.dependencies import build_record_store
from media_board.middleware import BodySizeLimitMiddleware, CatchAllExceptionMiddleware
from media_board.routes import router
from media_board.uploads import UploadRejected

logger = logging.getLogger(__name__)


def _failure(status_code: int, message: Optional[str] = None) -> JSONResponse:
    content: dict = {"success": False}
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return _failure(400)

    @app.exception_handler(UploadRejected)
    async def _upload_rejected(request: Request, exc: UploadRejected):
        logger.error("Error: %s", exc.message)
        return _failure(500, exc.message)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Media Board Backend", version="0.1.0")
    app.state.settings = settings
    app.state.board = BoardState(build_record_store(settings))

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)

    # Added innermost first: CORS wraps the catch-all, which wraps the body cap.
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(CatchAllExceptionMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(router)
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")
    return app


def main() -> None:
    """Run the server with settings from the environment."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Backend running on port %s", settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
