"""SQLite-backed storage for users and notes."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL,
    api_key TEXT UNIQUE NOT NULL
);
CREATE TABLE IF NOT EXISTS notes (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    note TEXT NOT NULL,
    user_id TEXT NOT NULL REFERENCES users (id) ON DELETE CASCADE
);
"""

_CREATE_NOTE = """
INSERT INTO notes (id, created_at, updated_at, note, user_id)
VALUES (?, ?, ?, ?, ?)
"""

_GET_NOTE = "SELECT id, created_at, updated_at, note, user_id FROM notes WHERE id = ?"

_GET_NOTES_FOR_USER = (
    "SELECT id, created_at, updated_at, note, user_id FROM notes WHERE user_id = ?"
)

_CREATE_USER = """
INSERT INTO users (id, created_at, updated_at, name, api_key)
VALUES (?, ?, ?, ?, ?)
"""

_GET_USER = "SELECT id, created_at, updated_at, name, api_key FROM users WHERE api_key = ?"


class NotFoundError(LookupError):
    """Raised when a query that expects one row finds none."""


@dataclass(frozen=True)
class Note:
    """A note row as stored; timestamps are RFC 3339 strings."""

    id: str
    created_at: str
    updated_at: str
    note: str
    user_id: str


@dataclass(frozen=True)
class User:
    """A user row as stored; timestamps are RFC 3339 strings."""

    id: str
    created_at: str
    updated_at: str
    name: str
    api_key: str


class Queries:
    """The queries the application runs against its database."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def create_schema(self) -> None:
        """Create the users and notes tables if they do not exist."""
        self.conn.executescript(_SCHEMA)
        self.conn.commit()

    def create_note(self, note: Note) -> None:
        with self.conn:
            self.conn.execute(
                _CREATE_NOTE,
                (note.id, note.created_at, note.updated_at, note.note, note.user_id),
            )

    def get_note(self, note_id: str) -> Note:
        row = self.conn.execute(_GET_NOTE, (note_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"no note with id {note_id!r}")
        return Note(*row)

    def get_notes_for_user(self, user_id: str) -> list[Note]:
        return [Note(*row) for row in self.conn.execute(_GET_NOTES_FOR_USER, (user_id,))]

    def create_user(self, user: User) -> None:
        with self.conn:
            self.conn.execute(
                _CREATE_USER,
                (user.id, user.created_at, user.updated_at, user.name, user.api_key),
            )

    def get_user(self, api_key: str) -> User:
        row = self.conn.execute(_GET_USER, (api_key,)).fetchone()
        if row is None:
            raise NotFoundError("no user with that api key")
        return User(*row)


def connect(url: str) -> Queries:
    """Open the SQLite database at *url* (a path, ':memory:' or a 'file:' URI)."""
    if not url:
        raise ValueError("database url is empty")
    if url.startswith("sqlite://"):
        url = url[len("sqlite://"):]
    conn = sqlite3.connect(url, uri=url.startswith("file:"), check_same_thread=False)
    conn.execute("PRAGMA foreign_keys = ON")
    return Queries(conn)