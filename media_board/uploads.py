"""
Single-file upload handling: policy checks and streaming to disk.

Multipart bodies are parsed incrementally, so a file is rejected as soon as
it breaks its policy instead of after the whole request has been received.
"""

import logging
import os
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import Request
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from media_board.config import Settings

logger = logging.getLogger(__name__)

MEDIA = "media"
SOUND = "sound"


class UploadRejected(Exception):
    """Raised when an upload violates its policy. Nothing is kept on disk."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class UploadPolicy:
    category: str
    mime_prefixes: tuple[str, ...]
    max_bytes: int
    mime_error: str

    def accepts(self, content_type: Optional[str]) -> bool:
        return (content_type or "").startswith(self.mime_prefixes)


@dataclass(frozen=True)
class StoredUpload:
    filename: str
    path: Path
    content_type: str
    size: int


def policy_for(category: str, settings: Settings) -> UploadPolicy:
    if category == MEDIA:
        return UploadPolicy(
            category=MEDIA,
            mime_prefixes=("image/", "video/"),
            max_bytes=settings.media_max_bytes,
            mime_error="Only image / gif / video allowed",
        )
    if category == SOUND:
        return UploadPolicy(
            category=SOUND,
            mime_prefixes=("audio/",),
            max_bytes=settings.sound_max_bytes,
            mime_error="Only audio files allowed",
        )
    raise ValueError(f"Unknown upload category: {category}")


def generate_filename(original_name: Optional[str]) -> str:
    """
    Build ``<ms timestamp>-<random int><original extension>``.

    Collisions are unlikely but not impossible; uuid4 would remove the
    window without changing the URL format clients see.
    """
    timestamp = int(time.time() * 1000)
    suffix = random.randint(0, 10**9)
    extension = os.path.splitext(original_name or "")[1]
    return f"{timestamp}-{suffix}{extension}"


class FileSink:
    """Writes one accepted file part to ``upload_dir`` under a fresh name."""

    def __init__(
        self,
        policy: UploadPolicy,
        upload_dir: Path,
        original_name: str,
        content_type: str,
    ):
        if not policy.accepts(content_type):
            raise UploadRejected(policy.mime_error)
        self.policy = policy
        self.content_type = content_type
        self.filename = generate_filename(original_name)
        self.path = upload_dir / self.filename
        self.size = 0
        self.complete = False
        self._handle = open(self.path, "wb")

    def write(self, data: bytes) -> None:
        self.size += len(data)
        if self.size > self.policy.max_bytes:
            raise UploadRejected("File too large")
        self._handle.write(data)

    def finish(self) -> StoredUpload:
        self._handle.close()
        self.complete = True
        logger.info(
            "Stored %s upload %s (%s, %d bytes)",
            self.policy.category,
            self.filename,
            self.content_type,
            self.size,
        )
        return StoredUpload(
            filename=self.filename,
            path=self.path,
            content_type=self.content_type,
            size=self.size,
        )

    def discard(self) -> None:
        self._handle.close()
        self.path.unlink(missing_ok=True)


class _SingleFileCallbacks:
    """
    Parser callbacks that keep the file part named ``field`` and drop the rest.

    Parts without a filename (plain fields, or a file input left empty) are
    ignored. A file under another field name, or a second file, is rejected.
    """

    def __init__(self, field: str, policy: UploadPolicy, upload_dir: Path):
        self.field = field
        self.policy = policy
        self.upload_dir = upload_dir
        self.sink: Optional[FileSink] = None
        self.stored: Optional[StoredUpload] = None
        self._writing = False
        self._reset_part()

    def _reset_part(self) -> None:
        self._header_name = b""
        self._header_value = b""
        self._disposition = b""
        self._part_type = b""

    def as_dict(self) -> dict:
        return {
            "on_part_begin": self.on_part_begin,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
        }

    def on_part_begin(self) -> None:
        self._reset_part()

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_name += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        name = self._header_name.lower()
        if name == b"content-disposition":
            self._disposition = self._header_value
        elif name == b"content-type":
            self._part_type = self._header_value
        self._header_name = b""
        self._header_value = b""

    def on_headers_finished(self) -> None:
        _, options = parse_options_header(self._disposition)
        filename = options.get(b"filename", b"").decode("utf-8", "replace")
        if not filename:
            return
        name = options.get(b"name", b"").decode("utf-8", "replace")
        if name != self.field or self.sink is not None:
            raise UploadRejected("Unexpected field")
        self.sink = FileSink(
            self.policy,
            self.upload_dir,
            filename,
            self._part_type.decode("latin-1").strip(),
        )
        self._writing = True

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._writing:
            self.sink.write(data[start:end])

    def on_part_end(self) -> None:
        if self._writing:
            self.stored = self.sink.finish()
            self._writing = False


async def receive_single_file(
    stream: AsyncIterator[bytes],
    content_type: Optional[str],
    field: str,
    policy: UploadPolicy,
    upload_dir: Path,
) -> Optional[StoredUpload]:
    """
    Stream a multipart body, storing the single file sent in ``field``.

    Returns ``None`` when the body is not multipart or carries no file in
    ``field``. Raises ``UploadRejected`` as soon as a policy is broken; any
    partially written file is removed first.
    """
    media_type, params = parse_options_header(content_type)
    boundary = params.get(b"boundary")
    if media_type != b"multipart/form-data" or not boundary:
        return None

    callbacks = _SingleFileCallbacks(field, policy, upload_dir)
    parser = MultipartParser(boundary, callbacks.as_dict())
    try:
        async for chunk in stream:
            if chunk:
                parser.write(chunk)
        parser.finalize()
        if callbacks.sink is not None and not callbacks.sink.complete:
            raise UploadRejected("Unexpected end of form")
    except MultipartParseError as exc:
        if callbacks.sink is not None:
            callbacks.sink.discard()
        raise UploadRejected(str(exc) or "Malformed multipart body") from exc
    except BaseException:
        if callbacks.sink is not None:
            callbacks.sink.discard()
        raise
    return callbacks.stored


class SingleFileUpload:
    """
    Dependency that accepts one file in ``field`` and stores it on disk.

    Resolves to ``None`` when the request carries no file in ``field`` so the
    route can answer with its own 400.
    """

    def __init__(self, field: str, category: str):
        self.field = field
        self.category = category

    async def __call__(self, request: Request) -> Optional[StoredUpload]:
        settings: Settings = request.app.state.settings
        policy = policy_for(self.category, settings)
        return await receive_single_file(
            request.stream(),
            request.headers.get("content-type"),
            self.field,
            policy,
            Path(settings.upload_dir),
        )
