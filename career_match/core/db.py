"""SQLite database layer for talent profiles and the career path catalog.

Both tables keep the original document as JSON so that fields unknown to the
matcher (contact details, saved jobs, ...) survive round trips.
"""

import json
import sqlite3
import uuid
from pathlib import Path
from typing import Any

_TALENTS_TABLE = """
CREATE TABLE IF NOT EXISTS talents (
    id          TEXT PRIMARY KEY,
    talent_id   TEXT NOT NULL UNIQUE,
    data        TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
);
"""

_CAREER_PATHS_TABLE = """
CREATE TABLE IF NOT EXISTS career_paths (
    seq         INTEGER PRIMARY KEY AUTOINCREMENT,
    id          TEXT NOT NULL UNIQUE,
    data        TEXT NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_TALENTS_TABLE)
    conn.execute(_CAREER_PATHS_TABLE)
    conn.commit()
    return conn


def upsert_talent(conn: sqlite3.Connection, document: dict[str, Any]) -> str:
    """Insert or replace a talent document keyed by its ``talentId``.

    Returns the record id (``$id`` from the document, or a generated one).
    """
    talent_id = document.get("talentId")
    if not talent_id:
        msg = "talent document requires a 'talentId'"
        raise ValueError(msg)

    existing = conn.execute(
        "SELECT id FROM talents WHERE talent_id = ?", (str(talent_id),)
    ).fetchone()
    record_id = str(document.get("$id") or (existing["id"] if existing else uuid.uuid4().hex))
    data = {k: v for k, v in document.items() if k != "$id"}

    conn.execute(
        """
        INSERT INTO talents (id, talent_id, data) VALUES (?, ?, ?)
        ON CONFLICT(talent_id) DO UPDATE SET
            data = excluded.data,
            updated_at = datetime('now')
        """,
        (record_id, str(talent_id), json.dumps(data)),
    )
    conn.commit()
    return existing["id"] if existing else record_id


def find_talent(conn: sqlite3.Connection, talent_id: str) -> dict[str, Any] | None:
    """Return the talent document (with ``$id``) or None."""
    row = conn.execute(
        "SELECT id, data FROM talents WHERE talent_id = ? LIMIT 1", (talent_id,)
    ).fetchone()
    if row is None:
        return None
    document: dict[str, Any] = json.loads(row["data"])
    document["$id"] = row["id"]
    return document


def update_talent(conn: sqlite3.Connection, record_id: str, fields: dict[str, Any]) -> bool:
    """Merge ``fields`` into a stored talent document.

    Returns False when no talent has ``record_id``.
    """
    row = conn.execute("SELECT data FROM talents WHERE id = ?", (record_id,)).fetchone()
    if row is None:
        return False
    document = json.loads(row["data"])
    document.update(fields)
    conn.execute(
        "UPDATE talents SET data = ?, updated_at = datetime('now') WHERE id = ?",
        (json.dumps(document), record_id),
    )
    conn.commit()
    return True


def upsert_career_path(conn: sqlite3.Connection, document: dict[str, Any]) -> bool:
    """Insert a career path document, replacing data for a known id.

    Returns True if a new row was inserted. Replacing keeps catalog order.
    """
    path_id = document.get("$id") or document.get("id")
    if not path_id:
        msg = "career path document requires an '$id' or 'id'"
        raise ValueError(msg)
    data = {k: v for k, v in document.items() if k not in ("$id", "id")}

    cursor = conn.execute(
        "UPDATE career_paths SET data = ? WHERE id = ?", (json.dumps(data), str(path_id))
    )
    if cursor.rowcount:
        conn.commit()
        return False
    conn.execute(
        "INSERT INTO career_paths (id, data) VALUES (?, ?)", (str(path_id), json.dumps(data))
    )
    conn.commit()
    return True


def list_career_paths(
    conn: sqlite3.Connection,
    limit: int,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """Return one page of career path documents in insertion order."""
    rows = conn.execute(
        "SELECT id, data FROM career_paths ORDER BY seq LIMIT ? OFFSET ?",
        (limit, offset),
    ).fetchall()
    return [_path_document(row) for row in rows]


def get_career_path(conn: sqlite3.Connection, path_id: str) -> dict[str, Any] | None:
    row = conn.execute(
        "SELECT id, data FROM career_paths WHERE id = ?", (path_id,)
    ).fetchone()
    return _path_document(row) if row is not None else None


def _path_document(row: sqlite3.Row) -> dict[str, Any]:
    document: dict[str, Any] = json.loads(row["data"])
    document["$id"] = row["id"]
    return document
