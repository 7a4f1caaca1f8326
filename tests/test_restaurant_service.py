from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from core.errors import NotFoundError, ValidationError
from core.restaurant_service import (
    create_restaurant,
    delete_restaurant,
    get_image,
    get_restaurant,
    get_restaurant_view,
    list_restaurant_views,
    list_restaurants,
    rate_restaurant,
    update_restaurant,
)
from core.view_cache import get_cache_stats
from models.audit_log import AuditLog
from models.category import Category
from models.image import Image
from models.restaurant import Restaurant


def _orders(restaurant):
    return sorted(image.order for image in restaurant.images)


def _category_names(restaurant):
    return {category.name for category in restaurant.categories}


# ── Create ───────────────────────────────────────────────────────────────


def test_create_requires_name(db, storage):
    with pytest.raises(ValidationError):
        create_restaurant(db, storage, "   ")
    assert db.query(Restaurant).count() == 0


def test_create_with_categories_and_note(db, storage):
    restaurant = create_restaurant(db, storage, " Cafe Aurora ", note="  great pastries ",
                                   category_names=["Cafe", "Brunch"])
    assert restaurant.id is not None
    assert restaurant.name == "Cafe Aurora"
    assert restaurant.note == "great pastries"
    assert restaurant.rating is None
    assert _category_names(restaurant) == {"Cafe", "Brunch"}


def test_create_blank_note_is_stored_as_none(db, storage):
    restaurant = create_restaurant(db, storage, "Aurora", note="   ")
    assert restaurant.note is None


def test_create_keeps_original_slot_numbers(db, storage, make_upload):
    restaurant = create_restaurant(db, storage, "Sakura",
                                   files=[make_upload("a.jpg"), None, make_upload("c.jpg")])
    assert _orders(restaurant) == [1, 3]
    for image in restaurant.images:
        assert os.path.exists(storage.path_for(image.url))


def test_create_skips_zero_byte_uploads(db, storage, make_upload):
    restaurant = create_restaurant(db, storage, "Sakura",
                                   files=[make_upload("empty.jpg", b""), make_upload("b.jpg")])
    assert _orders(restaurant) == [2]


def test_create_ignores_uploads_past_fifth_slot(db, storage, make_upload):
    files = [make_upload(f"{i}.jpg") for i in range(6)]
    restaurant = create_restaurant(db, storage, "Sakura", files=files)
    assert _orders(restaurant) == [1, 2, 3, 4, 5]
    assert db.query(Image).count() == 5


def test_create_storage_failure_keeps_partial_restaurant(db, storage, make_upload):
    files = [make_upload("a.jpg"), make_upload("b.jpg"), make_upload("c.jpg")]
    with patch.object(storage, "store", side_effect=["/uploads/a.jpg", OSError("disk full")]):
        with pytest.raises(OSError):
            create_restaurant(db, storage, "Half Done", files=files)

    restaurant = db.query(Restaurant).filter(Restaurant.name == "Half Done").one()
    assert [(image.url, image.order) for image in restaurant.images] == [("/uploads/a.jpg", 1)]


def test_create_writes_audit_entry(db, storage):
    create_restaurant(db, storage, "Aurora", actor="alice@example.com")
    entry = db.query(AuditLog).filter(AuditLog.action == "Added restaurant: Aurora").one()
    assert entry.actor == "alice@example.com"


# ── Update ───────────────────────────────────────────────────────────────


def test_update_replaces_category_set(db, storage):
    restaurant = create_restaurant(db, storage, "Aurora", category_names=["Cafe"])
    update_restaurant(db, storage, restaurant.id, "Aurora", category_names=["Pub", "Brunch", "Pub"])

    db.expire_all()
    assert _category_names(get_restaurant(db, restaurant.id)) == {"Pub", "Brunch"}


def test_update_unknown_restaurant(db, storage):
    with pytest.raises(NotFoundError):
        update_restaurant(db, storage, 999, "Ghost")


def test_update_requires_name(db, storage):
    restaurant = create_restaurant(db, storage, "Aurora")
    with pytest.raises(ValidationError):
        update_restaurant(db, storage, restaurant.id, "  ")
    db.expire_all()
    assert get_restaurant(db, restaurant.id).name == "Aurora"


def test_update_fills_lowest_free_slot(db, storage, make_upload):
    restaurant = create_restaurant(db, storage, "Aurora",
                                   files=[make_upload("one.jpg"), None, make_upload("three.jpg")])
    slot_one = next(image for image in restaurant.images if image.order == 1)
    old_path = storage.path_for(slot_one.url)

    restaurant = update_restaurant(db, storage, restaurant.id, "Aurora",
                                   delete_image_ids=[slot_one.id], new_files=[make_upload("new.jpg")])

    assert _orders(restaurant) == [1, 3]
    assert get_image(db, slot_one.id) is None
    assert not os.path.exists(old_path)
    new_cover = next(image for image in restaurant.images if image.order == 1)
    assert new_cover.url.endswith("-new.jpg")


def test_update_six_uploads_into_empty_restaurant(db, storage, make_upload):
    restaurant = create_restaurant(db, storage, "Aurora")
    files = [make_upload(f"{i}.jpg") for i in range(6)]
    restaurant = update_restaurant(db, storage, restaurant.id, "Aurora", new_files=files)
    assert _orders(restaurant) == [1, 2, 3, 4, 5]
    assert db.query(Image).filter(Image.restaurant_id == restaurant.id).count() == 5


def test_update_ignores_other_restaurants_images(db, storage, make_upload):
    mine = create_restaurant(db, storage, "Mine", files=[make_upload()])
    theirs = create_restaurant(db, storage, "Theirs", files=[make_upload()])
    their_image_id = theirs.images[0].id

    update_restaurant(db, storage, mine.id, "Mine", delete_image_ids=[their_image_id])

    assert get_image(db, their_image_id) is not None


def test_update_keeps_retained_image_orders(db, storage, make_upload):
    restaurant = create_restaurant(db, storage, "Aurora",
                                   files=[None, make_upload("two.jpg"), None, make_upload("four.jpg")])
    restaurant = update_restaurant(db, storage, restaurant.id, "Aurora",
                                   new_files=[make_upload("x.jpg"), make_upload("y.jpg")])
    assert _orders(restaurant) == [1, 2, 3, 4]
    urls = {image.order: image.url for image in restaurant.images}
    assert urls[2].endswith("-two.jpg")
    assert urls[4].endswith("-four.jpg")


def test_update_tolerates_missing_stored_file(db, storage, make_upload):
    restaurant = create_restaurant(db, storage, "Aurora", files=[make_upload()])
    image = restaurant.images[0]
    os.remove(storage.path_for(image.url))

    restaurant = update_restaurant(db, storage, restaurant.id, "Aurora", delete_image_ids=[image.id])
    assert restaurant.images == []


# ── Rate ─────────────────────────────────────────────────────────────────


@pytest.mark.parametrize("rating", [0, 5.1, -1, "abc", None, float("nan"), float("inf")])
def test_rate_rejects_out_of_range(db, storage, rating):
    restaurant = create_restaurant(db, storage, "Aurora")
    with pytest.raises(ValidationError):
        rate_restaurant(db, restaurant.id, rating)


@pytest.mark.parametrize("restaurant_id", [0, -3, "abc", None, 1.5])
def test_rate_rejects_bad_id(db, restaurant_id):
    with pytest.raises(ValidationError):
        rate_restaurant(db, restaurant_id, 3)


def test_rate_unknown_restaurant(db):
    with pytest.raises(NotFoundError):
        rate_restaurant(db, 999, 3)


def test_rate_is_idempotent(db, storage):
    restaurant = create_restaurant(db, storage, "Aurora")
    rate_restaurant(db, restaurant.id, 3)
    rate_restaurant(db, str(restaurant.id), "3")
    db.expire_all()
    assert get_restaurant(db, restaurant.id).rating == 3.0


def test_rate_accepts_bounds(db, storage):
    restaurant = create_restaurant(db, storage, "Aurora")
    assert rate_restaurant(db, restaurant.id, 1).rating == 1.0
    assert rate_restaurant(db, restaurant.id, 5).rating == 5.0


# ── Delete ───────────────────────────────────────────────────────────────


def test_delete_removes_rows_and_files(db, storage, make_upload):
    restaurant = create_restaurant(db, storage, "Aurora", category_names=["Brunch"],
                                   files=[make_upload("a.jpg"), make_upload("b.jpg")])
    image_ids = [image.id for image in restaurant.images]
    paths = [storage.path_for(image.url) for image in restaurant.images]

    assert delete_restaurant(db, storage, restaurant.id) is True

    assert get_restaurant(db, restaurant.id) is None
    for image_id in image_ids:
        assert get_image(db, image_id) is None
    for path in paths:
        assert not os.path.exists(path)


def test_delete_falsy_or_unknown_id_is_noop(db, storage):
    create_restaurant(db, storage, "Aurora")
    assert delete_restaurant(db, storage, 0) is False
    assert delete_restaurant(db, storage, None) is False
    assert delete_restaurant(db, storage, 999) is False
    assert db.query(Restaurant).count() == 1


def test_delete_ignores_file_errors(db, storage, make_upload):
    restaurant = create_restaurant(db, storage, "Aurora", files=[make_upload(), make_upload()])
    with patch.object(storage, "delete", side_effect=PermissionError("busy")) as mock_delete:
        assert delete_restaurant(db, storage, restaurant.id) is True
    assert mock_delete.call_count == 2
    assert db.query(Image).count() == 0


def test_delete_keeps_categories(db, storage):
    restaurant = create_restaurant(db, storage, "Aurora", category_names=["Brunch"])
    delete_restaurant(db, storage, restaurant.id)
    assert db.query(Category).filter(Category.name == "Brunch").count() == 1


# ── Reads and cached views ───────────────────────────────────────────────


def test_list_restaurants_newest_first(db, storage):
    create_restaurant(db, storage, "First")
    create_restaurant(db, storage, "Second")
    assert [r.name for r in list_restaurants(db)] == ["Second", "First"]


def test_list_views_are_cached_until_mutation(db, storage):
    restaurant = create_restaurant(db, storage, "Aurora")

    views = list_restaurant_views(db)
    assert [v.name for v in views] == ["Aurora"]
    assert list_restaurant_views(db) is views
    assert get_cache_stats()["hits"] >= 1

    rate_restaurant(db, restaurant.id, 4)
    assert list_restaurant_views(db)[0].rating == 4.0


def test_detail_view_invalidated_on_update(db, storage, make_upload):
    restaurant = create_restaurant(db, storage, "Aurora", files=[None, make_upload("cover.jpg")])
    view = get_restaurant_view(db, restaurant.id)
    assert view.cover.order == 2

    update_restaurant(db, storage, restaurant.id, "Aurora Bakery", new_files=[make_upload("first.jpg")])
    view = get_restaurant_view(db, restaurant.id)
    assert view.name == "Aurora Bakery"
    assert view.cover.order == 1


def test_detail_view_after_delete(db, storage):
    restaurant = create_restaurant(db, storage, "Aurora")
    get_restaurant_view(db, restaurant.id)
    delete_restaurant(db, storage, restaurant.id)
    assert get_restaurant_view(db, restaurant.id) is None
