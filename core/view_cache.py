# core/view_cache.py
"""Cached list and detail views of restaurants.

Mutations invalidate the paths they affect; the next read rebuilds them.
"""
from __future__ import annotations

import threading
import time
from typing import Any, Callable

LIST_PATHS = ("/", "/restaurants")

_cache: dict[str, dict[str, Any]] = {}
_lock = threading.Lock()
_hits: int = 0
_misses: int = 0


def detail_path(restaurant_id: int) -> str:
    return f"/restaurants/{restaurant_id}"


def cache_get(path: str) -> Any | None:
    global _hits, _misses
    with _lock:
        entry = _cache.get(path)
        if entry is not None:
            _hits += 1
            return entry["value"]
        _misses += 1
        return None


def cache_set(path: str, value: Any) -> None:
    with _lock:
        _cache[path] = {"value": value, "created_at": time.time()}


def get_or_build(path: str, build: Callable[[], Any]) -> Any:
    value = cache_get(path)
    if value is None:
        value = build()
        cache_set(path, value)
    return value


def invalidate(*paths: str) -> None:
    with _lock:
        for path in paths:
            _cache.pop(path, None)


def invalidate_lists() -> None:
    invalidate(*LIST_PATHS)


def invalidate_restaurant(restaurant_id: int) -> None:
    invalidate(*LIST_PATHS, detail_path(restaurant_id))


def get_cache_stats() -> dict:
    with _lock:
        total = _hits + _misses
        return {
            "size": len(_cache),
            "hits": _hits,
            "misses": _misses,
            "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
        }


def clear_cache() -> None:
    global _hits, _misses
    with _lock:
        _cache.clear()
        _hits = 0
        _misses = 0
