# core/image_slots.py
"""Assign new uploads to the free photo slots (1..5) of a restaurant."""
from __future__ import annotations

from typing import Iterable, Sequence, TypeVar

MAX_IMAGES = 5

T = TypeVar("T")


def free_slots(retained_orders: Iterable[int]) -> list[int]:
    used = set(retained_orders)
    return [order for order in range(1, MAX_IMAGES + 1) if order not in used]


def allocate_slots(retained_orders: Iterable[int], uploads: Sequence[T]) -> list[tuple[int, T]]:
    """Pair each upload with the lowest free slot, in upload order.

    Slots held by retained images are never reused. Uploads left over once
    all five slots are taken are dropped without error.
    """
    return list(zip(free_slots(retained_orders), uploads))


def dropped_count(retained_orders: Iterable[int], uploads: Sequence[T]) -> int:
    return max(0, len(uploads) - len(free_slots(retained_orders)))
