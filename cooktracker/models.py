from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional
from urllib.parse import urlparse

ALL_CATEGORY = "All"
CATEGORIES = (ALL_CATEGORY, "Meal", "Dessert", "Snack")
DEFAULT_CATEGORY = "Meal"


def new_recipe_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Recipe:
    """Domain object representing a stored recipe."""

    id: str
    title: Optional[str] = None
    ingredients: Optional[str] = None
    instructions: Optional[str] = None
    source_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    category: Optional[str] = None
    difficulty: int = 0
    estimated_time_minutes: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Ids of cooking sessions; the sessions themselves are stored elsewhere.
    cooking_record_ids: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def category_display_name(self) -> str:
        return self.category or DEFAULT_CATEGORY

    @property
    def difficulty_stars(self) -> List[bool]:
        return [star <= self.difficulty for star in range(1, 6)]

    @property
    def estimated_time_text(self) -> str:
        minutes = self.estimated_time_minutes
        if minutes < 60:
            return f"{minutes} min"

        hours, remaining = divmod(minutes, 60)
        if remaining == 0:
            return f"{hours} h"
        return f"{hours} h {remaining} min"

    @property
    def has_valid_url(self) -> bool:
        if not self.source_url:
            return False
        parsed = urlparse(self.source_url)
        return bool(parsed.scheme and parsed.netloc)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the fields a list view needs into JSON friendly values."""

        return {
            "id": self.id,
            "title": self.title or "",
            "ingredients": self.ingredients or "",
            "category": self.category_display_name,
            "difficulty": self.difficulty,
            "estimated_time_minutes": self.estimated_time_minutes,
            "estimated_time_text": self.estimated_time_text,
            "source_url": self.source_url if self.has_valid_url else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


__all__ = ["ALL_CATEGORY", "CATEGORIES", "DEFAULT_CATEGORY", "Recipe", "new_recipe_id"]
