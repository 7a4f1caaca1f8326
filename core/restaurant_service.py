# core/restaurant_service.py
"""Create, update, rate and delete restaurants together with their photos and tags."""
import math

from sqlalchemy.orm import Session
from models.restaurant import Restaurant
from models.category import Category
from models.image import Image
from core.category_service import ensure_defaults_once, resolve_many
from core.errors import NotFoundError, ValidationError
from core.image_slots import MAX_IMAGES, allocate_slots, dropped_count
from core.logger import get_logger, log_action
from core.storage import is_empty_upload
from core.view_cache import detail_path, get_or_build, invalidate_lists, invalidate_restaurant
from core.views import to_view

logger = get_logger(__name__)

LIST_PATH = "/"


# ===================== VALIDATION =====================

def _clean_name(name) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required.")
    return name


def _clean_note(note):
    return (note or "").strip() or None


def parse_restaurant_id(value) -> int:
    """Accept ints and digit strings; anything else, zero or negative is invalid."""
    if isinstance(value, bool):
        raise ValidationError("Invalid restaurant id.")
    try:
        restaurant_id = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("Invalid restaurant id.")
    if restaurant_id <= 0 or (isinstance(value, float) and value != restaurant_id):
        raise ValidationError("Invalid restaurant id.")
    return restaurant_id


def parse_rating(value) -> float:
    if isinstance(value, bool) or value is None:
        raise ValidationError("Rating must be between 1 and 5.")
    try:
        rating = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Rating must be between 1 and 5.")
    if not math.isfinite(rating) or rating < 1 or rating > 5:
        raise ValidationError("Rating must be between 1 and 5.")
    return rating


# ===================== HELPERS =====================

def _resolve_categories(db: Session, category_names):
    ensure_defaults_once(db)
    ids = resolve_many(db, category_names)
    if not ids:
        return []
    found = {c.id: c for c in db.query(Category).filter(Category.id.in_(ids)).all()}
    return [found[category_id] for category_id in ids]


def _commit(db: Session):
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def _delete_files(storage, urls):
    """Best-effort removal of stored files; the database row is the source of truth."""
    for url in urls:
        try:
            storage.delete(url)
        except OSError:
            logger.warning("Could not delete stored image %s", url, exc_info=True)


def _store_images(db: Session, storage, restaurant: Restaurant, placements):
    # A storage failure stops the loop; images stored so far are kept.
    for order, file in placements:
        url = storage.store(file)
        restaurant.images.append(Image(url=url, order=order))
        _commit(db)


# ===================== READS =====================

def get_restaurant(db: Session, restaurant_id: int):
    return db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()


def get_image(db: Session, image_id: int):
    return db.query(Image).filter(Image.id == image_id).first()


def list_restaurants(db: Session):
    """All restaurants, newest first."""
    return db.query(Restaurant).order_by(Restaurant.created_at.desc(), Restaurant.id.desc()).all()


def list_restaurant_views(db: Session):
    return get_or_build(LIST_PATH, lambda: tuple(to_view(r) for r in list_restaurants(db)))


def get_restaurant_view(db: Session, restaurant_id: int):
    restaurant_id = parse_restaurant_id(restaurant_id)

    def build():
        restaurant = get_restaurant(db, restaurant_id)
        return to_view(restaurant) if restaurant else None

    return get_or_build(detail_path(restaurant_id), build)


# ===================== MUTATIONS =====================

def create_restaurant(db: Session, storage, name: str, note: str = None,
                      category_names=(), files=(), actor: str = None) -> Restaurant:
    """
    Create a restaurant with its tags and up to five photos.

    `files` is indexed by slot: files[0] goes to slot 1 and so on. Empty
    slots (None or zero bytes) are skipped, anything past slot 5 is ignored.
    """
    name = _clean_name(name)
    note = _clean_note(note)
    categories = _resolve_categories(db, category_names)

    restaurant = Restaurant(name=name, note=note, categories=categories)
    db.add(restaurant)
    log_action(db, f"Added restaurant: {name}", actor)
    _commit(db)

    files = list(files or ())
    extra = [f for f in files[MAX_IMAGES:] if not is_empty_upload(f)]
    if extra:
        logger.warning("Ignoring %d upload(s) beyond slot %d for restaurant %s", len(extra), MAX_IMAGES, restaurant.id)

    placements = [
        (order, file)
        for order, file in enumerate(files[:MAX_IMAGES], start=1)
        if not is_empty_upload(file)
    ]
    try:
        _store_images(db, storage, restaurant, placements)
    finally:
        invalidate_lists()

    return restaurant


def update_restaurant(db: Session, storage, restaurant_id: int, name: str, note: str = None,
                      category_names=(), delete_image_ids=(), new_files=(), actor: str = None) -> Restaurant:
    """
    Update name/note, replace the category set and add or remove photos.

    Retained photos keep their slot; new uploads fill the lowest free slots.
    """
    restaurant = get_restaurant(db, restaurant_id)
    if not restaurant:
        raise NotFoundError("Restaurant not found.")
    name = _clean_name(name)
    note = _clean_note(note)
    categories = _resolve_categories(db, category_names)

    # Only this restaurant's images can be deleted through it
    delete_ids = set(delete_image_ids or ())
    removed = [image for image in restaurant.images if image.id in delete_ids]
    retained = [image for image in restaurant.images if image.id not in delete_ids]
    removed_urls = [image.url for image in removed]

    restaurant.name = name
    restaurant.note = note
    restaurant.categories = categories
    for image in removed:
        restaurant.images.remove(image)
    log_action(db, f"Updated restaurant: {name}", actor)
    _commit(db)

    _delete_files(storage, removed_urls)

    uploads = [f for f in (new_files or ()) if not is_empty_upload(f)]
    retained_orders = [image.order for image in retained]
    skipped = dropped_count(retained_orders, uploads)
    if skipped:
        logger.warning("All %d photo slots taken; dropped %d upload(s) for restaurant %s",
                       MAX_IMAGES, skipped, restaurant.id)

    try:
        _store_images(db, storage, restaurant, allocate_slots(retained_orders, uploads))
    finally:
        invalidate_restaurant(restaurant.id)

    db.refresh(restaurant)
    return restaurant


def rate_restaurant(db: Session, restaurant_id, rating, actor: str = None) -> Restaurant:
    restaurant_id = parse_restaurant_id(restaurant_id)
    rating = parse_rating(rating)

    restaurant = get_restaurant(db, restaurant_id)
    if not restaurant:
        raise NotFoundError("Restaurant not found.")

    restaurant.rating = rating
    log_action(db, f"Rated restaurant {restaurant.name}: {rating:g}", actor)
    _commit(db)
    invalidate_restaurant(restaurant_id)
    return restaurant


def delete_restaurant(db: Session, storage, restaurant_id: int, actor: str = None) -> bool:
    """
    Delete a restaurant and its photos.

    Rows go in one transaction; stored files are removed afterwards and a
    file that cannot be removed is only logged. Returns False when there was
    nothing to delete.
    """
    if not restaurant_id:
        return False

    restaurant = get_restaurant(db, restaurant_id)
    if not restaurant:
        return False

    images = list(restaurant.images)
    urls = [image.url for image in images]
    try:
        for image in images:
            db.delete(image)
        db.delete(restaurant)
        log_action(db, f"Deleted restaurant: {restaurant.name}", actor)
        db.commit()
    except Exception:
        db.rollback()
        raise

    _delete_files(storage, urls)
    invalidate_restaurant(restaurant_id)
    return True
