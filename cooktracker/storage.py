from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Protocol, Tuple

from .models import Recipe, new_recipe_id

logger = logging.getLogger(__name__)

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sort_by_updated_at(recipes: Iterable[Recipe]) -> List[Recipe]:
    """Order recipes newest first.

    Ties keep their incoming order and records without ``updated_at`` go last.
    Naive timestamps are taken to be UTC.
    """

    def _key(recipe: Recipe) -> Tuple[bool, datetime]:
        updated_at = recipe.updated_at
        if updated_at is None:
            return (False, _EARLIEST)
        if updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=timezone.utc)
        return (True, updated_at)

    return sorted(recipes, key=_key, reverse=True)


class EntityStore(Protocol):
    """Protocol describing the store the recipe repository works against."""

    @property
    def has_changes(self) -> bool:
        """Return ``True`` while staged changes are waiting for :meth:`save`."""

    def create(self, **fields) -> Recipe:
        """Stage a new recipe and return it."""

    def fetch_all(self) -> List[Recipe]:
        """Return all recipes ordered by ``updated_at`` descending.

        Raises :class:`~cooktracker.errors.FetchError` when the store cannot be
        read. An empty store yields an empty list.
        """

    def delete(self, recipe: Recipe) -> None:
        """Stage the removal of ``recipe`` or raise :class:`KeyError`.

        A store that has to look the record up first raises
        :class:`~cooktracker.errors.PersistenceError` when that lookup fails.
        """

    def save(self) -> None:
        """Commit staged changes or raise :class:`~cooktracker.errors.PersistenceError`."""

    def rollback(self) -> None:
        """Discard staged changes."""


class MemoryEntityStore(EntityStore):
    """Process local store used for tests, previews and as a fallback backend."""

    def __init__(self, recipes: Optional[Iterable[Recipe]] = None) -> None:
        self._committed: List[Recipe] = list(recipes or [])
        self._working: List[Recipe] = list(self._committed)
        self._dirty = False

    @property
    def has_changes(self) -> bool:
        return self._dirty

    def create(self, **fields) -> Recipe:
        now = utcnow()
        fields.setdefault("id", new_recipe_id())
        fields.setdefault("created_at", now)
        fields.setdefault("updated_at", now)

        recipe_id = fields["id"]
        if any(existing.id == recipe_id for existing in self._working):
            raise ValueError(f"Recipe '{recipe_id}' already exists.")

        recipe = Recipe(**fields)
        self._working.append(recipe)
        self._dirty = True
        return recipe

    def fetch_all(self) -> List[Recipe]:
        return sort_by_updated_at(self._working)

    def delete(self, recipe: Recipe) -> None:
        for index, existing in enumerate(self._working):
            if existing.id == recipe.id:
                self._working.pop(index)
                self._dirty = True
                return
        raise KeyError(recipe.id)

    def save(self) -> None:
        if not self._dirty:
            return

        self._commit()
        self._committed = list(self._working)
        self._dirty = False
        logger.debug("Committed %d recipes to memory store", len(self._committed))

    def rollback(self) -> None:
        self._working = list(self._committed)
        self._dirty = False

    def _commit(self) -> None:
        """Write the working copy somewhere durable.

        Called by :meth:`save` before the working copy becomes the committed
        one. The memory store keeps nothing outside the process, so this does
        nothing here. Subclasses that persist the copy (a file, a test double
        that simulates a full disk) override it and raise
        :class:`~cooktracker.errors.PersistenceError` on failure, which leaves
        the committed copy untouched for :meth:`rollback`.
        """


__all__ = ["EntityStore", "MemoryEntityStore", "sort_by_updated_at", "utcnow"]
