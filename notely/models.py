"""API-facing models converted from stored rows."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from notely import database as db

_RFC3339 = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)


def _parse_rfc3339(value: str) -> datetime:
    match = _RFC3339.match(value)
    if match is None:
        raise ValueError(f"cannot parse {value!r} as RFC 3339 time")
    date, clock, fraction, offset = match.groups()
    micro = (fraction or "")[:6].ljust(6, "0")
    if offset in ("Z", "z"):
        offset = "+00:00"
    return datetime.fromisoformat(f"{date}T{clock}.{micro}{offset}")


def _format_rfc3339(value: datetime) -> str:
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if offset is None or offset == timedelta(0):
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


@dataclass(frozen=True)
class User:
    id: str
    created_at: datetime
    updated_at: datetime
    name: str
    api_key: str

    def to_dict(self) -> dict[str, str]:
        """Return the JSON-ready representation."""
        return {
            "id": self.id,
            "created_at": _format_rfc3339(self.created_at),
            "updated_at": _format_rfc3339(self.updated_at),
            "name": self.name,
            "api_key": self.api_key,
        }


@dataclass(frozen=True)
class Note:
    id: str
    created_at: datetime
    updated_at: datetime
    note: str
    user_id: str

    def to_dict(self) -> dict[str, str]:
        """Return the JSON-ready representation."""
        return {
            "id": self.id,
            "created_at": _format_rfc3339(self.created_at),
            "updated_at": _format_rfc3339(self.updated_at),
            "note": self.note,
            "user_id": self.user_id,
        }


def database_user_to_user(user: db.User) -> User:
    """Convert a stored user, parsing its timestamps; raises ValueError."""
    return User(
        id=user.id,
        created_at=_parse_rfc3339(user.created_at),
        updated_at=_parse_rfc3339(user.updated_at),
        name=user.name,
        api_key=user.api_key,
    )


def database_note_to_note(note: db.Note) -> Note:
    """Convert a stored note, parsing its timestamps; raises ValueError."""
    return Note(
        id=note.id,
        created_at=_parse_rfc3339(note.created_at),
        updated_at=_parse_rfc3339(note.updated_at),
        note=note.note,
        user_id=note.user_id,
    )


def database_notes_to_notes(notes: Iterable[db.Note]) -> list[Note]:
    """Convert stored notes; the first bad timestamp raises ValueError."""
    return [database_note_to_note(note) for note in notes]