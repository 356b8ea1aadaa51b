from __future__ import annotations

from pathlib import Path
import sys
from datetime import datetime, timedelta, timezone

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from cooktracker.errors import FetchError, PersistenceError
from cooktracker.models import Recipe
from cooktracker.repository import RecipeRepository
from cooktracker.samples import SAMPLE_RECIPES
from cooktracker.storage import MemoryEntityStore

BASE_TIME = datetime(2025, 6, 26, 12, 0, tzinfo=timezone.utc)


class UnreadableStore(MemoryEntityStore):
    def fetch_all(self):
        raise FetchError("disk unavailable")


class UnwritableStore(MemoryEntityStore):
    def __init__(self, recipes=None) -> None:
        super().__init__(recipes)
        self.save_attempts = 0

    def _commit(self) -> None:
        self.save_attempts += 1
        raise PersistenceError("disk full")


def make_recipe(recipe_id: str, title: str, minutes_ago: int, category: str = "Meal") -> Recipe:
    updated_at = BASE_TIME - timedelta(minutes=minutes_ago)
    return Recipe(
        id=recipe_id,
        title=title,
        category=category,
        created_at=updated_at,
        updated_at=updated_at,
    )


def test_store_orders_recipes_by_updated_at_descending():
    store = MemoryEntityStore(
        [
            make_recipe("old", "Old", minutes_ago=30),
            make_recipe("new", "New", minutes_ago=0),
            make_recipe("mid", "Mid", minutes_ago=10),
        ]
    )

    assert [recipe.id for recipe in store.fetch_all()] == ["new", "mid", "old"]


def test_store_keeps_insertion_order_for_ties_and_puts_undated_last():
    store = MemoryEntityStore(
        [
            Recipe(id="undated", title="Undated"),
            make_recipe("first", "First", minutes_ago=5),
            make_recipe("second", "Second", minutes_ago=5),
        ]
    )

    assert [recipe.id for recipe in store.fetch_all()] == ["first", "second", "undated"]


def test_store_create_assigns_id_and_timestamps():
    store = MemoryEntityStore()

    recipe = store.create(title="Soup", category="Meal")

    assert recipe.id
    assert recipe.created_at is not None
    assert recipe.updated_at == recipe.created_at
    assert store.has_changes
    assert store.fetch_all() == [recipe]


def test_store_rejects_duplicate_ids():
    store = MemoryEntityStore([make_recipe("a", "A", minutes_ago=0)])

    with pytest.raises(ValueError):
        store.create(id="a", title="Again")


def test_store_rollback_restores_committed_state():
    original = make_recipe("a", "A", minutes_ago=0)
    store = MemoryEntityStore([original])

    store.delete(original)
    store.create(title="Staged")
    store.rollback()

    assert store.fetch_all() == [original]
    assert not store.has_changes


def test_store_delete_unknown_recipe_raises_key_error():
    store = MemoryEntityStore()

    with pytest.raises(KeyError):
        store.delete(Recipe(id="missing"))


def test_list_recipes_returns_store_order():
    store = MemoryEntityStore(
        [make_recipe("b", "B", minutes_ago=20), make_recipe("a", "A", minutes_ago=1)]
    )
    repository = RecipeRepository(store)

    assert [recipe.title for recipe in repository.list_recipes()] == ["A", "B"]


def test_list_recipes_returns_empty_list_when_store_is_unreadable(caplog):
    repository = RecipeRepository(UnreadableStore())

    with caplog.at_level("ERROR", logger="cooktracker.repository"):
        assert repository.list_recipes() == []

    assert "Failed to fetch recipes" in caplog.text


def test_delete_recipe_removes_and_persists():
    recipe = make_recipe("a", "A", minutes_ago=0)
    store = MemoryEntityStore([recipe, make_recipe("b", "B", minutes_ago=5)])
    repository = RecipeRepository(store)

    repository.delete_recipe(recipe)

    assert not store.has_changes
    assert [existing.id for existing in repository.list_recipes()] == ["b"]

    store.rollback()
    assert [existing.id for existing in store.fetch_all()] == ["b"]


def test_delete_recipe_rolls_back_and_raises_when_save_fails():
    recipe = make_recipe("a", "A", minutes_ago=0)
    store = UnwritableStore([recipe])
    repository = RecipeRepository(store)

    with pytest.raises(PersistenceError):
        repository.delete_recipe(recipe)

    assert store.save_attempts == 1
    assert not store.has_changes
    assert repository.list_recipes() == [recipe]


def test_save_context_is_a_noop_without_changes():
    store = UnwritableStore()
    repository = RecipeRepository(store)

    repository.save_context()
    repository.save_context()

    assert store.save_attempts == 0


def test_add_recipe_persists_new_recipe():
    store = MemoryEntityStore()
    repository = RecipeRepository(store)

    recipe = repository.add_recipe(title="Curry", category="Meal", difficulty=3)

    assert not store.has_changes
    assert repository.list_recipes() == [recipe]
    assert recipe.difficulty == 3


def test_seed_samples_only_fills_an_empty_store():
    store = MemoryEntityStore()
    repository = RecipeRepository(store)

    assert repository.seed_samples() == len(SAMPLE_RECIPES)
    assert repository.seed_samples() == 0
    assert len(repository.list_recipes()) == len(SAMPLE_RECIPES)


def test_seed_samples_skips_unreadable_store():
    repository = RecipeRepository(UnreadableStore())

    assert repository.seed_samples() == 0


def test_store_orders_naive_timestamps_as_utc_next_to_created_recipes():
    naive_old = Recipe(id="legacy", title="Legacy", updated_at=datetime(2020, 1, 1, 8, 0))
    naive_new = Recipe(id="future", title="Future", updated_at=datetime(2999, 1, 1, 8, 0))
    store = MemoryEntityStore([naive_old, naive_new])
    created = store.create(title="Fresh")

    assert [recipe.id for recipe in store.fetch_all()] == ["future", created.id, "legacy"]
    assert [recipe.id for recipe in RecipeRepository(store).list_recipes()] == [
        "future",
        created.id,
        "legacy",
    ]
