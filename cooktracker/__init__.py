import logging
import os
import threading
from typing import Any, Dict, Optional, Tuple, Union

from flask import Flask, Response, jsonify, request

from .controller import RecipeListController
from .errors import PersistenceError
from .models import CATEGORIES, Recipe
from .repository import RecipeRepository
from .storage import EntityStore, MemoryEntityStore

try:
    from .gcp_storage import CLIENT_SETUP_ERRORS, FirestoreEntityStore
except ImportError:  # pragma: no cover - allows running tests without optional deps
    CLIENT_SETUP_ERRORS = ()  # type: ignore[assignment]
    FirestoreEntityStore = None  # type: ignore[assignment,misc]

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "ingredients", "instructions", "source_url", "thumbnail_url", "category")
INTEGER_FIELDS = ("difficulty", "estimated_time_minutes")

ViewResult = Union[Response, Tuple[Response, int]]


def create_app(store: Optional[EntityStore] = None) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    store:
        Optional entity store. When ``None`` the backend is chosen through the
        ``COOKTRACKER_STORAGE`` environment variable, see :func:`store_from_env`.
    """

    app = Flask(__name__)

    if store is None:
        store = store_from_env()

    repository = RecipeRepository(store)
    if os.environ.get("COOKTRACKER_SEED_SAMPLES", "").lower() in {"1", "true", "yes"}:
        repository.seed_samples()

    app.config["RECIPE_STORE"] = store
    app.config["RECIPE_CONTROLLER"] = RecipeListController(repository)
    # The controller expects one caller at a time.
    controller_lock = threading.Lock()

    def _state(controller: RecipeListController) -> Dict[str, Any]:
        return {
            "search": controller.search_text,
            "category": controller.selected_category,
            "recipes": [recipe.to_dict() for recipe in controller.visible_recipes],
        }

    @app.get("/categories")
    def list_categories() -> Response:
        return jsonify(categories=list(CATEGORIES))

    @app.get("/recipes")
    def list_recipes() -> Response:
        controller: RecipeListController = app.config["RECIPE_CONTROLLER"]

        with controller_lock:
            if "search" in request.args:
                controller.set_search_text(request.args["search"])
            if "category" in request.args:
                controller.set_category(request.args["category"])
            return jsonify(_state(controller))

    @app.post("/recipes")
    def create_recipe() -> ViewResult:
        controller: RecipeListController = app.config["RECIPE_CONTROLLER"]

        fields, error = _recipe_fields(request.get_json(silent=True))
        if error:
            return jsonify(error=error), 400

        with controller_lock:
            try:
                recipe = repository.add_recipe(**fields)
            except PersistenceError as exc:
                return jsonify(error=f"Failed to save recipe: {exc}"), 503
            controller.refresh()

        return jsonify(recipe=recipe.to_dict()), 201

    @app.post("/recipes/visible/<int:index>/delete")
    def delete_recipe(index: int) -> ViewResult:
        controller: RecipeListController = app.config["RECIPE_CONTROLLER"]

        with controller_lock:
            try:
                deleted = controller.delete_visible(index)
            except IndexError:
                return jsonify(error="Recipe not found."), 404
            except KeyError:
                return jsonify(error="Recipe not found."), 404
            except PersistenceError as exc:
                return jsonify(error=f"Failed to delete recipe: {exc}"), 503

            return jsonify(deleted=deleted.to_dict(), **_state(controller))

    @app.post("/refresh")
    def refresh() -> Response:
        controller: RecipeListController = app.config["RECIPE_CONTROLLER"]

        with controller_lock:
            controller.refresh()
            return jsonify(_state(controller))

    return app


def store_from_env() -> EntityStore:
    """Pick the entity store named by ``COOKTRACKER_STORAGE``.

    ``memory`` selects a process local store. Anything else asks for Firestore
    and falls back to memory when the Firestore client cannot be set up.
    """

    backend = os.environ.get("COOKTRACKER_STORAGE", "firestore").lower()
    if backend == "memory":
        return MemoryEntityStore()

    if FirestoreEntityStore is None:
        logger.warning("google-cloud-firestore is not installed; using an in-memory store")
        return MemoryEntityStore()

    try:
        return FirestoreEntityStore.from_env()
    except CLIENT_SETUP_ERRORS as exc:
        logger.warning("Could not connect to Firestore (%s); using an in-memory store", exc)
        return MemoryEntityStore()


def _recipe_fields(payload: Any) -> Tuple[Dict[str, Any], Optional[str]]:
    if not isinstance(payload, dict):
        return {}, "Expected a JSON object."

    fields: Dict[str, Any] = {}
    for name in TEXT_FIELDS:
        value = payload.get(name)
        if value is not None:
            fields[name] = str(value).strip()

    if not fields.get("title"):
        return {}, "Please provide a recipe title."

    for name in INTEGER_FIELDS:
        value = payload.get(name)
        if value is None:
            continue
        try:
            fields[name] = int(value)
        except (TypeError, ValueError):
            return {}, f"'{name}' must be a whole number."

    return fields, None


__all__ = ["create_app", "store_from_env", "Recipe"]
