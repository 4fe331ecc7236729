"""
Typed accessors for the board's records.

Each record is an independent document. Getters return the record's fallback
when the stored document is missing, unparsable or has the wrong shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from media_board.schemas import MediaRecord
from media_board.store import RecordStore

IMAGE_FILE = "lastImage.json"
TOP_MEDIA_FILE = "topMedia.json"
YES_MEDIA_FILE = "yesMedia.json"
TOP_NOTE_FILE = "topNote.json"
NOTES_FILE = "notes.json"
SOUND_FILE = "lastSound.json"


def _field(document: Any, key: str) -> Any:
    if isinstance(document, dict):
        return document.get(key)
    return None


def _media_record(document: Any) -> Optional[MediaRecord]:
    url = _field(document, "url")
    media_type = _field(document, "type")
    if isinstance(url, str) and isinstance(media_type, str):
        return MediaRecord(url=url, type=media_type)
    return None


@dataclass
class BoardState:
    store: RecordStore

    # Legacy image
    def save_last_image(self, url: str) -> None:
        self.store.write(IMAGE_FILE, {"imageUrl": url})

    def get_last_image(self) -> Optional[str]:
        url = _field(self.store.read(IMAGE_FILE, {}), "imageUrl")
        return url if isinstance(url, str) and url else None

    # Top media
    def save_top_media(self, url: str, media_type: str) -> None:
        self.store.write(TOP_MEDIA_FILE, {"url": url, "type": media_type})

    def get_top_media(self) -> Optional[MediaRecord]:
        return _media_record(self.store.read(TOP_MEDIA_FILE, None))

    # Yes media
    def save_yes_media(self, url: str, media_type: str) -> None:
        self.store.write(YES_MEDIA_FILE, {"url": url, "type": media_type})

    def get_yes_media(self) -> Optional[MediaRecord]:
        return _media_record(self.store.read(YES_MEDIA_FILE, None))

    # Top note (admin controlled text)
    def save_top_note(self, text: str) -> None:
        self.store.write(TOP_NOTE_FILE, {"text": text})

    def get_top_note(self) -> str:
        text = _field(self.store.read(TOP_NOTE_FILE, {"text": ""}), "text")
        return text if isinstance(text, str) else ""

    # Notes list
    def save_notes(self, notes: list) -> None:
        self.store.write(NOTES_FILE, {"notes": notes})

    def get_notes(self) -> list:
        notes = _field(self.store.read(NOTES_FILE, {"notes": []}), "notes")
        return notes if isinstance(notes, list) else []

    # Sound
    def save_last_sound(self, url: str) -> None:
        self.store.write(SOUND_FILE, {"soundUrl": url})

    def get_last_sound(self) -> Optional[str]:
        url = _field(self.store.read(SOUND_FILE, {}), "soundUrl")
        return url if isinstance(url, str) and url else None
