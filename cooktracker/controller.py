from __future__ import annotations

import logging
from typing import Callable, List, Sequence, Tuple

from .filtering import filter_recipes
from .models import ALL_CATEGORY, CATEGORIES, Recipe
from .repository import RecipeRepository

logger = logging.getLogger(__name__)

Subscriber = Callable[[Tuple[Recipe, ...]], None]


class RecipeListController:
    """Holds the search state of the recipe list and the recipes it selects.

    Every mutator recomputes :attr:`visible_recipes` before returning, so a
    reader always sees the result of the last state change. Subscribers are
    called synchronously with the new visible tuple after each recompute.

    The controller is not thread-safe. Callers running it from several threads
    must serialise access themselves.
    """

    categories: Sequence[str] = CATEGORIES

    def __init__(self, repository: RecipeRepository, *, load: bool = True) -> None:
        self._repository = repository
        self._search_text = ""
        self._selected_category = ALL_CATEGORY
        self._all_recipes: Tuple[Recipe, ...] = ()
        self._visible_recipes: Tuple[Recipe, ...] = ()
        self._subscribers: List[Subscriber] = []

        if load:
            self.refresh()

    @property
    def search_text(self) -> str:
        return self._search_text

    @search_text.setter
    def search_text(self, text: str) -> None:
        self.set_search_text(text)

    @property
    def selected_category(self) -> str:
        return self._selected_category

    @selected_category.setter
    def selected_category(self, category: str) -> None:
        self.set_category(category)

    @property
    def all_recipes(self) -> Tuple[Recipe, ...]:
        return self._all_recipes

    @property
    def visible_recipes(self) -> Tuple[Recipe, ...]:
        return self._visible_recipes

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for visible set updates.

        Returns a function that removes the subscription again.
        """

        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def refresh(self) -> None:
        self._all_recipes = tuple(self._repository.list_recipes())
        self._recompute()

    def set_search_text(self, text: str) -> None:
        self._search_text = text or ""
        self._recompute()

    def set_category(self, category: str) -> None:
        self._selected_category = category
        self._recompute()

    def delete_visible(self, index: int) -> Recipe:
        """Delete the recipe shown at ``index`` and reload the list.

        Raises :class:`IndexError` for positions outside the visible set. When
        the store refuses the change the
        :class:`~cooktracker.errors.PersistenceError` propagates and the list
        is left as it was.
        """

        if not 0 <= index < len(self._visible_recipes):
            raise IndexError(f"No visible recipe at position {index}.")

        recipe = self._visible_recipes[index]
        try:
            self._repository.delete_recipe(recipe)
        except KeyError:
            logger.warning("Recipe %s was already removed from the store", recipe.id)
            self.refresh()
            raise

        self.refresh()
        return recipe

    def _recompute(self) -> None:
        self._visible_recipes = tuple(
            filter_recipes(self._all_recipes, self._search_text, self._selected_category)
        )
        for callback in list(self._subscribers):
            callback(self._visible_recipes)


__all__ = ["RecipeListController"]
