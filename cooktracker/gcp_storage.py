from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as gcloud_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore

from .errors import FetchError, PersistenceError
from .models import Recipe, new_recipe_id
from .storage import EntityStore, sort_by_updated_at, utcnow

logger = logging.getLogger(__name__)

# Raised by ``firestore.Client`` when credentials or a project cannot be found.
CLIENT_SETUP_ERRORS = (auth_exceptions.GoogleAuthError, OSError)

_STORED_FIELDS = (
    "title",
    "ingredients",
    "instructions",
    "source_url",
    "thumbnail_url",
    "category",
    "difficulty",
    "estimated_time_minutes",
    "created_at",
    "updated_at",
)


class FirestoreEntityStore(EntityStore):
    """Recipe store backed by a Firestore collection.

    Creates and deletes are staged in a :class:`firestore.WriteBatch` and only
    reach Firestore when :meth:`save` commits the batch.
    """

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        collection_name: str = "recipes",
        client: Optional[firestore.Client] = None,
    ) -> None:
        self._project = project
        self._collection_name = collection_name

        self._firestore_client = client or firestore.Client(project=project)
        self._collection = self._firestore_client.collection(collection_name)

        self._batch = self._firestore_client.batch()
        self._pending_creates: Dict[str, Recipe] = {}
        self._pending_deletes: set[str] = set()

    @classmethod
    def from_env(cls) -> "FirestoreEntityStore":
        """Build a store instance from environment variables."""

        project = os.environ.get("GCP_PROJECT")
        collection_name = os.environ.get("RECIPES_COLLECTION", "recipes")
        return cls(project=project, collection_name=collection_name)

    @property
    def has_changes(self) -> bool:
        return bool(self._pending_creates or self._pending_deletes)

    def create(self, **fields) -> Recipe:
        now = utcnow()
        fields.setdefault("id", new_recipe_id())
        fields.setdefault("created_at", now)
        fields.setdefault("updated_at", now)
        recipe = Recipe(**fields)

        self._batch.set(self._collection.document(recipe.id), self._recipe_to_doc(recipe))
        self._pending_creates[recipe.id] = recipe
        return recipe

    def fetch_all(self) -> List[Recipe]:
        query = self._collection.order_by("updated_at", direction=firestore.Query.DESCENDING)
        try:
            recipes = [self._doc_to_recipe(doc.id, doc.to_dict() or {}) for doc in query.stream()]
        except gcloud_exceptions.GoogleAPIError as exc:
            raise FetchError(f"Could not read collection '{self._collection_name}': {exc}") from exc

        if not self.has_changes:
            return recipes

        recipes = [recipe for recipe in recipes if recipe.id not in self._pending_deletes]
        recipes.extend(self._pending_creates.values())
        return sort_by_updated_at(recipes)

    def delete(self, recipe: Recipe) -> None:
        if recipe.id in self._pending_creates:
            self._pending_creates.pop(recipe.id)
        else:
            try:
                snapshot = self._collection.document(recipe.id).get()
            except gcloud_exceptions.GoogleAPIError as exc:
                raise PersistenceError(f"Could not look up recipe '{recipe.id}' for deletion: {exc}") from exc
            if not snapshot.exists:
                raise KeyError(f"Recipe '{recipe.id}' does not exist.")

        self._batch.delete(self._collection.document(recipe.id))
        self._pending_deletes.add(recipe.id)

    def save(self) -> None:
        if not self.has_changes:
            return

        try:
            self._batch.commit()
        except gcloud_exceptions.GoogleAPIError as exc:
            raise PersistenceError(f"Could not commit recipe changes: {exc}") from exc

        logger.debug(
            "Committed %d creates and %d deletes to '%s'",
            len(self._pending_creates),
            len(self._pending_deletes),
            self._collection_name,
        )
        self._reset_batch()

    def rollback(self) -> None:
        self._reset_batch()

    def _reset_batch(self) -> None:
        self._batch = self._firestore_client.batch()
        self._pending_creates.clear()
        self._pending_deletes.clear()

    @staticmethod
    def _recipe_to_doc(recipe: Recipe) -> Dict[str, Any]:
        doc = {name: getattr(recipe, name) for name in _STORED_FIELDS}
        doc["cooking_record_ids"] = sorted(recipe.cooking_record_ids)
        return doc

    @staticmethod
    def _doc_to_recipe(doc_id: str, data: Dict[str, Any]) -> Recipe:
        def _timestamp(value: Any) -> Optional[datetime]:
            return value if isinstance(value, datetime) else None

        def _integer(value: Any) -> int:
            return value if isinstance(value, int) else 0

        return Recipe(
            id=doc_id,
            title=data.get("title"),
            ingredients=data.get("ingredients"),
            instructions=data.get("instructions"),
            source_url=data.get("source_url"),
            thumbnail_url=data.get("thumbnail_url"),
            category=data.get("category"),
            difficulty=_integer(data.get("difficulty")),
            estimated_time_minutes=_integer(data.get("estimated_time_minutes")),
            created_at=_timestamp(data.get("created_at")),
            updated_at=_timestamp(data.get("updated_at")),
            cooking_record_ids=frozenset(data.get("cooking_record_ids") or ()),
        )


__all__ = ["CLIENT_SETUP_ERRORS", "FirestoreEntityStore"]
