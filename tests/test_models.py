from datetime import timedelta, timezone

import pytest

from notely import database as db
from notely.models import (
    database_note_to_note,
    database_notes_to_notes,
    database_user_to_user,
)


def _db_user(created="2024-01-01T00:00:00Z", updated="2024-01-02T03:04:05Z"):
    return db.User(
        id="u1", created_at=created, updated_at=updated, name="alice", api_key="placeholder"
    )


def _db_note(note_id="n1", created="2024-01-01T00:00:00Z", updated="2024-01-01T00:00:00Z"):
    return db.Note(
        id=note_id, created_at=created, updated_at=updated, note="hello", user_id="u1"
    )


def test_user_conversion_parses_times():
    user = database_user_to_user(_db_user())
    assert user.created_at.year == 2024
    assert user.updated_at.hour == 3
    assert user.created_at.utcoffset() == timedelta(0)
    assert user.name == "alice"
    assert user.api_key == "placeholder"


def test_user_to_dict_round_trips_strings():
    stored = _db_user()
    assert database_user_to_user(stored).to_dict() == {
        "id": stored.id,
        "created_at": stored.created_at,
        "updated_at": stored.updated_at,
        "name": stored.name,
        "api_key": stored.api_key,
    }


def test_note_to_dict_round_trips_strings():
    stored = _db_note()
    result = database_note_to_note(stored).to_dict()
    assert result["created_at"] == stored.created_at
    assert result["note"] == stored.note
    assert result["user_id"] == stored.user_id


def test_offset_times_keep_offset():
    stored = _db_note(created="2024-05-06T07:08:09+02:00")
    note = database_note_to_note(stored)
    assert note.created_at.utcoffset() == timedelta(hours=2)
    assert note.to_dict()["created_at"] == stored.created_at


def test_zero_offset_formats_as_z():
    note = database_note_to_note(_db_note(created="2024-01-01T00:00:00+00:00"))
    assert note.created_at.tzinfo is not None
    assert note.to_dict()["created_at"] == "2024-01-01T00:00:00Z"


def test_fractional_seconds_round_trip():
    stored = _db_note(created="2024-01-01T00:00:00.5Z")
    note = database_note_to_note(stored)
    assert note.created_at.microsecond == 500000
    assert note.to_dict()["created_at"] == stored.created_at


@pytest.mark.parametrize(
    "bad", ["", "2024-01-01", "2024-01-01 00:00:00Z", "2024-01-01T00:00:00", "nonsense"]
)
def test_bad_timestamp_rejected(bad):
    with pytest.raises(ValueError):
        database_user_to_user(_db_user(created=bad))


def test_bad_updated_timestamp_rejected():
    with pytest.raises(ValueError):
        database_note_to_note(_db_note(updated="yesterday"))


def test_notes_conversion_keeps_order():
    stored = [_db_note("a"), _db_note("b"), _db_note("c")]
    assert [n.id for n in database_notes_to_notes(stored)] == ["a", "b", "c"]


def test_notes_conversion_empty():
    assert database_notes_to_notes([]) == []


def test_notes_conversion_fails_on_any_bad_note():
    stored = [_db_note("a"), _db_note("b", created="bad")]
    with pytest.raises(ValueError):
        database_notes_to_notes(stored)


def test_parsed_time_is_utc_equivalent():
    note = database_note_to_note(_db_note(created="2024-01-01T02:00:00+02:00"))
    plain = database_note_to_note(_db_note(created="2024-01-01T00:00:00Z"))
    assert note.created_at == plain.created_at
    assert plain.created_at.tzinfo.utcoffset(None) == timezone.utc.utcoffset(None)