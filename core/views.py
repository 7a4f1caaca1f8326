# core/views.py
"""Immutable snapshots of restaurants as the list and detail pages show them.

Snapshots carry an explicit identity: `Persisted` for rows the server has
confirmed, `Pending` for entries the dashboard created locally and is still
waiting on.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union


@dataclass(frozen=True)
class Persisted:
    id: int


@dataclass(frozen=True)
class Pending:
    token: str


Identity = Union[Persisted, Pending]


@dataclass(frozen=True)
class CategoryView:
    id: Identity
    name: str
    is_custom: bool = True


@dataclass(frozen=True)
class ImageView:
    id: int
    url: str
    order: int


@dataclass(frozen=True)
class RestaurantView:
    id: Identity
    name: str
    note: Optional[str] = None
    rating: Optional[float] = None
    created_at: Optional[datetime] = None
    categories: tuple[CategoryView, ...] = field(default_factory=tuple)
    images: tuple[ImageView, ...] = field(default_factory=tuple)

    @property
    def is_pending(self) -> bool:
        return isinstance(self.id, Pending)

    @property
    def cover(self) -> Optional[ImageView]:
        """Slot 1 when present, otherwise the lowest occupied slot."""
        return min(self.images, key=lambda image: image.order) if self.images else None


def category_view(category) -> CategoryView:
    return CategoryView(id=Persisted(category.id), name=category.name, is_custom=bool(category.is_custom))


def to_view(restaurant) -> RestaurantView:
    """Snapshot a Restaurant row, including its categories and images."""
    return RestaurantView(
        id=Persisted(restaurant.id),
        name=restaurant.name,
        note=restaurant.note,
        rating=restaurant.rating,
        created_at=restaurant.created_at,
        categories=tuple(sorted((category_view(c) for c in restaurant.categories), key=lambda c: c.name)),
        images=tuple(
            ImageView(id=image.id, url=image.url, order=image.order)
            for image in sorted(restaurant.images, key=lambda image: image.order)
        ),
    )
