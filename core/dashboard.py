# core/dashboard.py
"""
Client-side projection of the restaurant list.

The dashboard applies a pending change to its local list right away and
throws the projection away once the server answers with the real list.
Everything here is a pure function over RestaurantView snapshots.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional, Sequence

from core.views import CategoryView, Identity, Pending, Persisted, RestaurantView

_tokens = itertools.count(1)


def new_pending_id(prefix: str = "restaurant") -> Pending:
    return Pending(f"{prefix}-{next(_tokens)}")


class ActionType(Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class OptimisticAction:
    type: ActionType
    restaurant: Optional[RestaurantView] = None
    target: Optional[Identity] = None


def reduce(state: Sequence[RestaurantView], action: OptimisticAction) -> tuple:
    """Return the list as it will look once `action` is applied."""
    if action.type is ActionType.ADD:
        return (action.restaurant, *state)
    if action.type is ActionType.UPDATE:
        return tuple(action.restaurant if r.id == action.restaurant.id else r for r in state)
    if action.type is ActionType.DELETE:
        return tuple(r for r in state if r.id != action.target)
    return tuple(state)


def reconcile(server_state: Iterable[RestaurantView]) -> tuple:
    """The server's list wins; no merging with the local projection."""
    return tuple(server_state)


def _project_categories(category_names, known_categories, prefix):
    known = {c.name.lower(): c for c in known_categories}
    projected = {}
    for raw in category_names or ():
        name = (raw or "").strip()
        if not name or name.lower() in projected:
            continue
        projected[name.lower()] = known.get(name.lower()) or CategoryView(
            id=new_pending_id(prefix), name=name, is_custom=True
        )
    return tuple(projected.values())


def _target(restaurant_id):
    """Identity for an id taken from the form; None when it is missing or not a positive integer."""
    if isinstance(restaurant_id, (Persisted, Pending)):
        return restaurant_id
    if isinstance(restaurant_id, bool):
        return None
    try:
        value = int(str(restaurant_id).strip())
    except (TypeError, ValueError):
        return None
    return Persisted(value) if value > 0 else None


def build_add_action(name, note, category_names, known_categories, now: datetime = None):
    """Provisional entry for a restaurant the server has not created yet."""
    name = (name or "").strip()
    if not name:
        return None
    restaurant = RestaurantView(
        id=new_pending_id(),
        name=name,
        note=(note or "").strip() or None,
        created_at=now or datetime.now(timezone.utc),
        categories=_project_categories(category_names, known_categories, "category"),
    )
    return OptimisticAction(ActionType.ADD, restaurant=restaurant)


def build_update_action(restaurant_id, name, note, category_names, known_categories,
                        state: Sequence[RestaurantView], fallback: RestaurantView = None):
    """Merge an edit over the last known version of the restaurant.

    Fields the edit form does not touch (photos, rating, created_at) come
    from the entry in `state`, or from `fallback` when the entry is gone.
    """
    name = (name or "").strip()
    target = _target(restaurant_id)
    if not name or target is None:
        return None
    previous = next((r for r in state if r.id == target), fallback)

    if previous is not None:
        restaurant = replace(
            previous,
            id=target,
            name=name,
            note=(note or "").strip() or None,
            categories=_project_categories(category_names, known_categories, "category"),
        )
    else:
        restaurant = RestaurantView(
            id=target,
            name=name,
            note=(note or "").strip() or None,
            created_at=datetime.now(timezone.utc),
            categories=_project_categories(category_names, known_categories, "category"),
        )
    return OptimisticAction(ActionType.UPDATE, restaurant=restaurant)


def build_delete_action(restaurant_id):
    target = _target(restaurant_id)
    if target is None:
        return None
    return OptimisticAction(ActionType.DELETE, target=target)


@dataclass
class OptimisticList:
    """Confirmed server state plus the actions still waiting for the server."""

    confirmed: tuple = ()
    pending: list = field(default_factory=list)

    @property
    def current(self) -> tuple:
        state = tuple(self.confirmed)
        for action in self.pending:
            state = reduce(state, action)
        return state

    def apply(self, action: Optional[OptimisticAction]) -> tuple:
        if action is not None:
            self.pending.append(action)
        return self.current

    def confirm(self, server_state: Iterable[RestaurantView]) -> tuple:
        """Server answered: drop every projection and take its list as-is."""
        self.confirmed = reconcile(server_state)
        self.pending.clear()
        return self.confirmed


# ===================== FILTERS =====================

@dataclass(frozen=True)
class ListFilter:
    search: str = ""
    category_ids: tuple = ()
    min_rating: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return bool(self.search.strip()) or bool(self.category_ids) or self.min_rating is not None


def _category_key(category_id):
    return category_id if isinstance(category_id, (Persisted, Pending)) else Persisted(category_id)


def matches(restaurant: RestaurantView, list_filter: ListFilter) -> bool:
    search = list_filter.search.strip().lower()
    if search and search not in restaurant.name.lower():
        return False

    if list_filter.category_ids:
        wanted = {_category_key(c) for c in list_filter.category_ids}
        if not any(category.id in wanted for category in restaurant.categories):
            return False

    if list_filter.min_rating is not None:
        # unrated counts as 0
        if (restaurant.rating or 0) < list_filter.min_rating:
            return False
    return True


def filter_restaurants(restaurants: Iterable[RestaurantView], list_filter: ListFilter = None) -> tuple:
    list_filter = list_filter or ListFilter()
    return tuple(r for r in restaurants if matches(r, list_filter))
