"""
Dependency wiring for the FastAPI app.
"""

import json
from typing import Any, Generic, TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from media_board.board import BoardState
from media_board.config import Settings
from media_board.store import InMemoryRecordStore, JsonFileRecordStore, RecordStore
from media_board.uploads import MEDIA, SOUND, SingleFileUpload

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_CONTENT_TYPES = {"application/json"}
FORM_CONTENT_TYPES = {"application/x-www-form-urlencoded"}


def build_record_store(settings: Settings) -> RecordStore:
    if settings.use_in_memory_store:
        return InMemoryRecordStore()
    return JsonFileRecordStore(settings.data_dir)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_board(request: Request) -> BoardState:
    """
    Return the app's board so record state is shared across requests.
    """
    return request.app.state.board


photo_upload = SingleFileUpload("photo", MEDIA)
media_upload = SingleFileUpload("media", MEDIA)
sound_upload = SingleFileUpload("sound", SOUND)


def _media_type(request: Request) -> str:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


async def _read_payload(request: Request) -> Any:
    media_type = _media_type(request)
    if media_type in JSON_CONTENT_TYPES or media_type.endswith("+json"):
        raw = await request.body()
        if not raw:
            return {}
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise RequestValidationError(
                [
                    {
                        "type": "json_invalid",
                        "loc": ("body",),
                        "msg": f"JSON decode error: {exc}",
                        "input": {},
                    }
                ]
            ) from exc
    if media_type in FORM_CONTENT_TYPES:
        form = await request.form()
        payload: dict[str, Any] = {}
        for key in form.keys():
            values = form.getlist(key)
            if key.endswith("[]"):
                payload[key[:-2]] = list(values)
            elif len(values) > 1:
                payload[key] = list(values)
            else:
                payload[key] = values[0]
        return payload
    return {}


class ParsedBody(Generic[ModelT]):
    """
    Dependency that validates a JSON or urlencoded body against ``model``.

    Shape mismatches surface as ``RequestValidationError`` so the app-level
    handler answers them uniformly.
    """

    def __init__(self, model: type[ModelT]):
        self.model = model

    async def __call__(self, request: Request) -> ModelT:
        payload = await _read_payload(request)
        try:
            return self.model.model_validate(payload)
        except ValidationError as exc:
            raise RequestValidationError(exc.errors()) from exc
