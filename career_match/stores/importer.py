"""Load catalog and talent documents from YAML/JSON files into SQLite."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from career_match.core.db import upsert_career_path, upsert_talent
from career_match.core.schemas import CatalogItem

logger = logging.getLogger(__name__)


def load_documents(path: str | Path, key: str | None = None) -> list[dict[str, Any]]:
    """Read a list of documents from a ``.json`` or ``.yaml`` file.

    The file may hold a bare list or a mapping with the list under ``key``.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Document file not found: {path}"
        raise FileNotFoundError(msg)

    text = path.read_text()
    raw: Any = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    if isinstance(raw, dict) and key is not None:
        raw = raw.get(key)
    if not isinstance(raw, list) or not all(isinstance(d, dict) for d in raw):
        msg = f"{path} must contain a list of documents"
        raise ValueError(msg)
    return raw


def import_catalog(conn: sqlite3.Connection, documents: list[dict[str, Any]]) -> int:
    """Validate and store career paths. Returns how many were new.

    Raises ValueError naming the first invalid document.
    """
    new_count = 0
    for index, document in enumerate(documents):
        try:
            CatalogItem.model_validate(document)
        except ValidationError as e:
            msg = f"Invalid career path at index {index}: {e}"
            raise ValueError(msg) from e
        if upsert_career_path(conn, document):
            new_count += 1
    logger.info("Imported %d career paths (%d new)", len(documents), new_count)
    return new_count


def import_profiles(conn: sqlite3.Connection, documents: list[dict[str, Any]]) -> int:
    """Store talent documents keyed by ``talentId``. Returns the count stored."""
    for document in documents:
        upsert_talent(conn, document)
    logger.info("Imported %d talent profiles", len(documents))
    return len(documents)
