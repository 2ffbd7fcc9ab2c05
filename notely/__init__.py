"""A small Flask JSON API for users and their notes, with API-key authentication and SQLite storage."""

__version__ = "0.1.0"