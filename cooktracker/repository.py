from __future__ import annotations

import logging
from typing import List

from .errors import FetchError, PersistenceError
from .models import Recipe
from .samples import SAMPLE_RECIPES
from .storage import EntityStore

logger = logging.getLogger(__name__)


class RecipeRepository:
    """Recipe operations on top of an :class:`EntityStore`.

    Read failures degrade to an empty list. Write failures roll the store back
    and raise :class:`PersistenceError` so callers can retry.
    """

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    @property
    def store(self) -> EntityStore:
        return self._store

    def list_recipes(self) -> List[Recipe]:
        """Return all recipes, most recently updated first."""

        try:
            return list(self._store.fetch_all())
        except FetchError:
            logger.exception("Failed to fetch recipes")
            return []

    def add_recipe(self, **fields) -> Recipe:
        recipe = self._store.create(**fields)
        self.save_context()
        logger.info("Added recipe %s (%r)", recipe.id, recipe.title)
        return recipe

    def delete_recipe(self, recipe: Recipe) -> None:
        """Remove ``recipe`` and persist immediately.

        Callers holding ``recipe`` must drop it; it no longer exists in the
        store once this returns.
        """

        self._store.delete(recipe)
        self.save_context()
        logger.info("Deleted recipe %s (%r)", recipe.id, recipe.title)

    def save_context(self) -> None:
        if not self._store.has_changes:
            return

        try:
            self._store.save()
        except PersistenceError:
            logger.exception("Failed to save recipe changes; rolling back")
            self._store.rollback()
            raise

    def seed_samples(self) -> int:
        """Add the starter recipes when the library is empty.

        Returns the number of recipes that were added.
        """

        try:
            if self._store.fetch_all():
                return 0
        except FetchError:
            logger.exception("Failed to check for existing recipes; not seeding samples")
            return 0

        for fields in SAMPLE_RECIPES:
            self._store.create(**fields)
        self.save_context()
        logger.info("Seeded %d sample recipes", len(SAMPLE_RECIPES))
        return len(SAMPLE_RECIPES)


__all__ = ["RecipeRepository"]
