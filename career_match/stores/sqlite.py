"""SQLite-backed profile and catalog stores."""

import logging
import sqlite3
from typing import Any

from pydantic import ValidationError

from career_match.core.db import (
    find_talent,
    get_career_path,
    list_career_paths,
    update_talent,
)
from career_match.core.schemas import CatalogItem
from career_match.stores.base import CatalogPage, CatalogStore, ProfileStore

logger = logging.getLogger(__name__)


class SqliteProfileStore(ProfileStore):
    """Talent documents in the ``talents`` table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    async def find(self, external_id: str) -> dict[str, Any] | None:
        return find_talent(self._conn, external_id)

    async def update(self, record_id: str, fields: dict[str, Any]) -> None:
        if not update_talent(self._conn, record_id, fields):
            msg = f"No talent record with id '{record_id}'"
            raise LookupError(msg)


class SqliteCatalogStore(CatalogStore):
    """Career path documents in the ``career_paths`` table.

    Documents are validated on import, so a row failing validation here was
    edited by hand; it is skipped with a warning but still counts as fetched.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    async def list_page(self, limit: int, offset: int = 0) -> CatalogPage:
        documents = list_career_paths(self._conn, limit, offset)
        items = [item for doc in documents if (item := _to_item(doc)) is not None]
        return CatalogPage(items=items, fetched=len(documents))

    async def get(self, item_id: str) -> CatalogItem | None:
        document = get_career_path(self._conn, item_id)
        return _to_item(document) if document is not None else None


def _to_item(document: dict[str, Any]) -> CatalogItem | None:
    try:
        return CatalogItem.model_validate(document)
    except ValidationError:
        logger.warning("Invalid career path '%s'", document.get("$id"), exc_info=True)
        return None
