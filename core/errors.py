# core/errors.py
"""Errors raised by the restaurant services.

The message of each error is meant to be shown to the user as-is.
"""


class RestaurantError(Exception):
    """Base class for user-facing service errors."""


class ValidationError(RestaurantError):
    """Bad input: empty name, rating out of range, malformed id."""


class NotFoundError(RestaurantError):
    """The referenced restaurant or category does not exist."""


class ProtectedCategoryError(RestaurantError):
    """Default categories (Cafe, Pub, Restaurant) cannot be deleted."""
