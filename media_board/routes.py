"""
HTTP routes for the media board API.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from media_board.board import BoardState
from media_board.config import Settings
from media_board.dependencies import (
    ParsedBody,
    get_app_settings,
    get_board,
    media_upload,
    photo_upload,
    sound_upload,
)
from media_board.schemas import (
    FailureResponse,
    MediaRecord,
    NotesRequest,
    NotesResponse,
    SoundResponse,
    SuccessResponse,
    TopNoteRequest,
    TopNoteResponse,
    UploadImageResponse,
    UploadMediaResponse,
    UploadSoundResponse,
)
from media_board.uploads import StoredUpload

logger = logging.getLogger(__name__)

router = APIRouter()

FAILURE_RESPONSES = {400: {"model": FailureResponse}, 500: {"model": FailureResponse}}


def _failure(status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=FailureResponse().model_dump(exclude_none=True),
    )


# Legacy image
@router.post(
    "/upload", response_model=UploadImageResponse, responses=FAILURE_RESPONSES
)
def upload_image(
    stored: Optional[StoredUpload] = Depends(photo_upload),
    board: BoardState = Depends(get_board),
    settings: Settings = Depends(get_app_settings),
):
    if stored is None:
        return _failure()
    url = settings.upload_url(stored.filename)
    board.save_last_image(url)
    return UploadImageResponse(imageUrl=url)


# Top media
@router.post(
    "/upload-top-media",
    response_model=UploadMediaResponse,
    responses=FAILURE_RESPONSES,
)
def upload_top_media(
    stored: Optional[StoredUpload] = Depends(media_upload),
    board: BoardState = Depends(get_board),
    settings: Settings = Depends(get_app_settings),
):
    if stored is None:
        return _failure()
    url = settings.upload_url(stored.filename)
    board.save_top_media(url, stored.content_type)
    return UploadMediaResponse(url=url)


@router.get("/get-top-media", response_model=Optional[MediaRecord])
def get_top_media(board: BoardState = Depends(get_board)):
    return board.get_top_media()


# Yes media
@router.post(
    "/upload-yes-media",
    response_model=UploadMediaResponse,
    responses=FAILURE_RESPONSES,
)
def upload_yes_media(
    stored: Optional[StoredUpload] = Depends(media_upload),
    board: BoardState = Depends(get_board),
    settings: Settings = Depends(get_app_settings),
):
    if stored is None:
        return _failure()
    url = settings.upload_url(stored.filename)
    board.save_yes_media(url, stored.content_type)
    return UploadMediaResponse(url=url)


@router.get("/get-yes-media", response_model=Optional[MediaRecord])
def get_yes_media(board: BoardState = Depends(get_board)):
    return board.get_yes_media()


# Top note (admin controlled text)
@router.post(
    "/set-top-note", response_model=SuccessResponse, responses=FAILURE_RESPONSES
)
def set_top_note(
    payload: TopNoteRequest = Depends(ParsedBody(TopNoteRequest)),
    board: BoardState = Depends(get_board),
):
    board.save_top_note(payload.text)
    return SuccessResponse()


@router.get("/get-top-note", response_model=TopNoteResponse)
def get_top_note(board: BoardState = Depends(get_board)):
    return TopNoteResponse(text=board.get_top_note())


# Notes list
@router.post(
    "/set-notes", response_model=SuccessResponse, responses=FAILURE_RESPONSES
)
def set_notes(
    payload: NotesRequest = Depends(ParsedBody(NotesRequest)),
    board: BoardState = Depends(get_board),
):
    board.save_notes(payload.notes)
    return SuccessResponse()


@router.get("/get-notes", response_model=NotesResponse)
def get_notes(board: BoardState = Depends(get_board)):
    return NotesResponse(notes=board.get_notes())


# Sound
@router.post(
    "/upload-sound", response_model=UploadSoundResponse, responses=FAILURE_RESPONSES
)
def upload_sound(
    stored: Optional[StoredUpload] = Depends(sound_upload),
    board: BoardState = Depends(get_board),
    settings: Settings = Depends(get_app_settings),
):
    if stored is None:
        return _failure()
    url = settings.upload_url(stored.filename)
    board.save_last_sound(url)
    return UploadSoundResponse(soundUrl=url)


@router.get("/get-sound", response_model=SoundResponse)
def get_sound(board: BoardState = Depends(get_board)):
    return SoundResponse(soundUrl=board.get_last_sound())
