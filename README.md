# notely

A small HTTP service that stores users and their notes in SQLite and serves
them as JSON. Each user gets an API key when they are created, and requests
about that user are authenticated with it.

## Installation

```
pip install .
```

For running the tests as well:

```
pip install ".[test]"
pytest
```

## Running the server

```
PORT=8080 DATABASE_URL=notely.db notely
```

The `notely` command takes no options besides `--help`. It reads a `.env` file
from the working directory if one exists, then looks at these environment
variables:

| Variable       | Meaning |
|----------------|---------|
| `PORT`         | Port to listen on, on all interfaces. Required: if it is unset or not a number, the command logs the problem and exits with status 1. |
| `DATABASE_URL` | SQLite database to use: a file path, `:memory:`, a `file:` URI, or any of these prefixed with `sqlite://`. Optional. |

When `DATABASE_URL` is set, the database is opened, foreign keys are switched
on, and the `users` and `notes` tables are created if they do not exist yet.
Without it the server still starts, but only the front page and the health
check are available; the user and note endpoints are left out.

The server is Flask's built-in server, started with `Flask.run`.

## Endpoints

| Method | Path          | Auth | Description |
|--------|---------------|------|-------------|
| GET    | `/`           | no   | The front page, read from `static/index.html` inside the `notely` package directory. |
| GET    | `/v1/healthz` | no   | Readiness check; answers `{"status":"ok"}`. |
| POST   | `/v1/users`   | no   | Create a user from `{"name": "..."}`; answers `201` with the user. |
| GET    | `/v1/users`   | yes  | The authenticated user. |
| GET    | `/v1/notes`   | yes  | All notes of the authenticated user, as a list. |
| POST   | `/v1/notes`   | yes  | Create a note from `{"note": "..."}`; answers `201` with the note. |

Authenticated requests carry the user's API key in the `Authorization` header:

```
Authorization: ApiKey placeholder
```

A missing or malformed header is answered with `401`; a key that belongs to no
user is answered with `404`. A request body that is not a JSON object, or whose
field is not a string, is answered with `500`; a missing field counts as an
empty string. Errors always come back as `{"error": "..."}`.

Users are returned with `id`, `created_at`, `updated_at`, `name` and `api_key`;
notes with `id`, `created_at`, `updated_at`, `note` and `user_id`. Ids are
random UUIDs, API keys are the hex SHA-256 digest of 32 random bytes, and
timestamps are RFC 3339 in UTC to the second (for example
`2024-01-02T03:04:05Z`).

Responses are compact JSON with `<`, `>` and `&` escaped as `\u003c`,
`\u003e` and `\u0026`.

Cross-origin requests are allowed from any `http://` or `https://` origin for
the methods GET, POST, PUT, DELETE and OPTIONS; the `Link` header is exposed
and preflight answers may be cached for 300 seconds.

If `static/index.html` is not present in the package directory, `GET /`
answers `500` with the error text.

## Using it from Python

- `notely.app.create_app(queries)` builds the Flask application around a
  `notely.database.Queries` object, or around `None` for an application without
  the user and note endpoints. It can be run under another WSGI server or
  exercised with Flask's test client.
- `notely.app.main(argv=None)` is what the `notely` command runs; it returns
  the exit status.
- `notely.database.connect(url)` opens a SQLite database and returns a
  `Queries` object; `Queries.create_schema()` creates the tables. `Queries`
  has `create_user`, `get_user`, `create_note`, `get_note` and
  `get_notes_for_user`, working with the `notely.database.User` and
  `notely.database.Note` row dataclasses. Lookups that find nothing raise
  `notely.database.NotFoundError`.
- `notely.models` converts stored rows into `User` and `Note` objects with
  parsed timestamps (`database_user_to_user`, `database_note_to_note`,
  `database_notes_to_notes`); their `to_dict()` gives the JSON shape above.
- `notely.auth.get_api_key(headers)` extracts the key from a mapping of
  request headers and raises `NoAuthHeaderIncludedError` or
  `MalformedAuthHeaderError` (both subclasses of `AuthError`) when it cannot.
- `notely.responses.respond_with_json(code, payload)` and
  `respond_with_error(code, msg, log_err)` build the JSON responses.

## What it does not do

Storage is local SQLite only; remote database servers are not supported.
There is no way to update or delete users or notes, and the package does not
ship a production-grade server of its own.