# core/category_service.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from models.category import Category
from core.errors import NotFoundError, ProtectedCategoryError, ValidationError
from core.logger import get_logger, log_action
from core.view_cache import invalidate_lists, invalidate_restaurant

logger = get_logger(__name__)

DEFAULT_CATEGORY_NAMES = ("Cafe", "Pub", "Restaurant")

# set by init_db.init_app() once the defaults are known to exist
_defaults_ready = False


def _get_or_create(db: Session, name: str, is_custom: bool) -> Category:
    """Upsert by exact name. The unique constraint on name settles races."""
    category = db.query(Category).filter(Category.name == name).first()
    if category:
        return category

    db.add(Category(name=name, is_custom=is_custom))
    try:
        db.commit()
    except IntegrityError:
        # someone else inserted the same name first
        db.rollback()
    return db.query(Category).filter(Category.name == name).one()


def ensure_defaults(db: Session):
    """Make sure Cafe, Pub and Restaurant exist. Existing rows are left untouched."""
    return [_get_or_create(db, name, is_custom=False) for name in DEFAULT_CATEGORY_NAMES]


def mark_defaults_ready(ready: bool = True):
    global _defaults_ready
    _defaults_ready = ready


def ensure_defaults_once(db: Session):
    """Lazy fallback for processes that skipped init_db.init_app()."""
    if not _defaults_ready:
        ensure_defaults(db)
        mark_defaults_ready()


def resolve(db: Session, name: str) -> int:
    return _get_or_create(db, name, is_custom=name not in DEFAULT_CATEGORY_NAMES).id


def resolve_many(db: Session, names) -> list:
    """Resolve trimmed, non-empty names to ids; duplicates collapse."""
    ids = []
    for raw in names or ():
        name = (raw or "").strip()
        if not name:
            continue
        category_id = resolve(db, name)
        if category_id not in ids:
            ids.append(category_id)
    return ids


def list_categories(db: Session):
    return db.query(Category).order_by(Category.name).all()


def get_category(db: Session, category_id: int):
    return db.query(Category).filter(Category.id == category_id).first()


def create_category(db: Session, name: str, actor: str = None) -> Category:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required.")

    existing = db.query(Category).filter(Category.name == name).first()
    if existing:
        return existing

    category = get_category(db, resolve(db, name))
    log_action(db, f"Added category: {name}", actor)
    db.commit()
    invalidate_lists()
    return category


def delete_category(db: Session, category_id: int, actor: str = None):
    """Delete a custom category and detach it from every restaurant."""
    category = get_category(db, category_id)
    if not category:
        raise NotFoundError("Category not found.")
    if not category.is_custom:
        raise ProtectedCategoryError(f"'{category.name}' is a default category and cannot be deleted.")

    affected = [restaurant.id for restaurant in category.restaurants]
    try:
        for restaurant in list(category.restaurants):
            restaurant.categories.remove(category)
        db.delete(category)
        log_action(db, f"Deleted category: {category.name}", actor)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Deleted category %r (detached from %d restaurants)", category.name, len(affected))
    invalidate_lists()
    for restaurant_id in affected:
        invalidate_restaurant(restaurant_id)
