from __future__ import annotations

from typing import Iterable, List

from .models import ALL_CATEGORY, Recipe


def matches_category(recipe: Recipe, category: str) -> bool:
    # Exact match; unlike the text search this is case-sensitive.
    return category == ALL_CATEGORY or recipe.category == category


def matches_query(recipe: Recipe, query: str) -> bool:
    if not query:
        return True

    needle = query.casefold()
    return needle in (recipe.title or "").casefold() or needle in (recipe.ingredients or "").casefold()


def filter_recipes(recipes: Iterable[Recipe], query: str, category: str) -> List[Recipe]:
    """Return the recipes visible for ``query`` within ``category``.

    The category filter runs first, then the text search over title and
    ingredients. Input order is preserved.
    """

    return [
        recipe
        for recipe in recipes
        if matches_category(recipe, category) and matches_query(recipe, query)
    ]


__all__ = ["filter_recipes", "matches_category", "matches_query"]
