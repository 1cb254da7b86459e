"""Abstract base classes for the profile and catalog stores."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from career_match.core.schemas import CatalogItem

logger = logging.getLogger(__name__)


class ProfileStore(ABC):
    """Where talent profiles live."""

    @abstractmethod
    async def find(self, external_id: str) -> dict[str, Any] | None:
        """Return the stored profile record for ``external_id`` or None.

        The record carries its store id under ``$id``.
        """

    @abstractmethod
    async def update(self, record_id: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into the record. Raises on failure."""


@dataclass(frozen=True)
class CatalogPage:
    """One page read from a catalog store.

    ``fetched`` is the number of rows read, counting rows the store skipped
    as invalid. Paging advances and stops on it, not on ``len(items)``.
    """

    items: list[CatalogItem]
    fetched: int


class CatalogStore(ABC):
    """Where career paths live."""

    @abstractmethod
    async def list_page(self, limit: int, offset: int = 0) -> CatalogPage:
        """Read up to ``limit`` rows starting at ``offset``, in catalog order."""

    @abstractmethod
    async def get(self, item_id: str) -> CatalogItem | None:
        """Return a single item or None."""


async def fetch_catalog(
    store: CatalogStore,
    page_size: int = 100,
    max_items: int | None = None,
) -> list[CatalogItem]:
    """Read the whole catalog, one page at a time.

    Stops at the first page with fewer rows than requested, or once
    ``max_items`` items are collected.
    Items whose id was already seen are dropped so ids stay unique.
    """
    items: list[CatalogItem] = []
    seen: set[str] = set()
    offset = 0
    while max_items is None or len(items) < max_items:
        limit = page_size if max_items is None else min(page_size, max_items - len(items))
        page = await store.list_page(limit, offset)
        for item in page.items:
            if item.id in seen:
                logger.warning("Duplicate catalog id '%s' ignored", item.id)
                continue
            seen.add(item.id)
            items.append(item)
        offset += page.fetched
        if page.fetched < limit:
            break
    logger.debug("Fetched %d catalog items", len(items))
    return items
