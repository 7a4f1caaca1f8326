# core/restaurant_actions.py
"""
Form handlers for the restaurant pages.

Each handler takes the submitted form as a mapping (repeated fields as
lists, photo slots as `image_1`..`image_5` / `newImage_1`..`newImage_5`)
and returns (success: bool, message: str) for the page to display.
"""
from sqlalchemy.orm import Session
from core import category_service, restaurant_service
from core.errors import RestaurantError
from core.image_slots import MAX_IMAGES


def _get(form, key, default=None):
    value = form.get(key, default)
    if isinstance(value, (list, tuple)):
        return value[0] if value else default
    return value


def _get_all(form, key):
    value = form.get(key)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _text(form, key):
    value = _get(form, key)
    return str(value).strip() if value is not None else ""


def _slot_files(form, prefix):
    return [_get(form, f"{prefix}{slot}") for slot in range(1, MAX_IMAGES + 1)]


def _image_ids(form):
    ids = []
    for raw in _get_all(form, "deleteImageIds"):
        try:
            value = int(str(raw).strip())
        except ValueError:
            continue
        if value > 0:
            ids.append(value)
    return ids


def add_restaurant_action(db: Session, storage, form, actor: str = None):
    try:
        restaurant = restaurant_service.create_restaurant(
            db,
            storage,
            name=_text(form, "name"),
            note=_text(form, "note"),
            category_names=_get_all(form, "categories"),
            files=_slot_files(form, "image_"),
            actor=actor,
        )
    except RestaurantError as e:
        return False, str(e)
    return True, f"{restaurant.name} added successfully!"


def update_restaurant_action(db: Session, storage, form, actor: str = None):
    try:
        restaurant_id = restaurant_service.parse_restaurant_id(_get(form, "id"))
        restaurant = restaurant_service.update_restaurant(
            db,
            storage,
            restaurant_id,
            name=_text(form, "name"),
            note=_text(form, "note"),
            category_names=_get_all(form, "categories"),
            delete_image_ids=_image_ids(form),
            new_files=_slot_files(form, "newImage_"),
            actor=actor,
        )
    except RestaurantError as e:
        return False, str(e)
    return True, f"{restaurant.name} updated!"


def rate_restaurant_action(db: Session, form, actor: str = None):
    restaurant_id = _get(form, "id") or _get(form, "restaurantId")
    try:
        restaurant = restaurant_service.rate_restaurant(db, restaurant_id, _get(form, "rating"), actor=actor)
    except RestaurantError as e:
        return False, str(e)
    return True, f"Rated {restaurant.name} {restaurant.rating:g}/5"


def delete_restaurant_action(db: Session, storage, restaurant_id, actor: str = None):
    try:
        restaurant_id = int(restaurant_id or 0)
    except (TypeError, ValueError):
        return False, "Invalid restaurant id."
    deleted = restaurant_service.delete_restaurant(db, storage, restaurant_id, actor=actor)
    return True, "Restaurant deleted" if deleted else "Nothing to delete"


def create_category_action(db: Session, name, actor: str = None):
    try:
        category = category_service.create_category(db, name, actor=actor)
    except RestaurantError as e:
        return False, str(e)
    return True, f"#{category.name} added"


def delete_category_action(db: Session, category_id, actor: str = None):
    try:
        category_service.delete_category(db, category_id, actor=actor)
    except RestaurantError as e:
        return False, str(e)
    return True, "Category deleted"
