"""
Pydantic schemas for the media board API.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, StrictStr


class MediaRecord(BaseModel):
    url: str
    type: str


class TopNoteRequest(BaseModel):
    text: StrictStr = Field(..., min_length=1)


class NotesRequest(BaseModel):
    notes: list[Any]


class SuccessResponse(BaseModel):
    success: Literal[True] = True


class FailureResponse(BaseModel):
    success: Literal[False] = False
    message: Optional[str] = None


class UploadImageResponse(SuccessResponse):
    imageUrl: str


class UploadMediaResponse(SuccessResponse):
    url: str


class UploadSoundResponse(SuccessResponse):
    soundUrl: str


class TopNoteResponse(BaseModel):
    text: str


class NotesResponse(BaseModel):
    notes: list[Any]


class SoundResponse(BaseModel):
    soundUrl: Optional[str] = None
