"""Tests for the pure image list operations."""

import pytest
from conftest import make_card, make_record
from pydantic import ValidationError

from gallery.core.exceptions import ImageIndexError, ImageLimitError
from gallery.images.collection import (
    add_images_to_card,
    get_all_images,
    get_primary_image,
    merge_images,
    migrate_legacy_image,
    normalize_card,
    remove_image_from_card,
    reorder_card_images,
    update_image_in_card,
    validate_card_structure,
)
from gallery.schemas.card import CardDocument
from gallery.schemas.image import ImageRecord


def ids(card: CardDocument) -> list[str]:
    return [img.id for img in card.images]


def assert_canonical(card: CardDocument) -> None:
    """Order matches position, only position 0 is primary, shadows agree."""
    assert [img.order for img in card.images] == list(range(len(card.images)))
    assert [img.is_primary for img in card.images] == [
        i == 0 for i in range(len(card.images))
    ]
    assert card.image_count == len(card.images)
    assert card.has_image is bool(card.images)
    if card.images:
        assert card.primary_image_id == card.images[0].id
        assert card.primary_image_url == card.images[0].url
        assert card.image_url == card.images[0].url
    else:
        assert card.primary_image_id is None
        assert card.image_url is None


def test_add_appends_and_reflows():
    card = make_card("a", "b")
    new = [make_record("c", 0, True), make_record("d", 7, True)]

    result = add_images_to_card(card, new)

    assert ids(result) == ["a", "b", "c", "d"]
    assert_canonical(result)


def test_add_to_empty_card_sets_shadow_fields():
    result = add_images_to_card(make_card(), [make_record("x", 3)])

    assert ids(result) == ["x"]
    assert_canonical(result)


def test_add_reasserts_position_zero_primary():
    """A stale primary flag elsewhere in the list is cleared."""
    card = make_card("a", "b")
    card = card.model_copy(
        update={"images": [card.images[0].model_copy(update={"is_primary": False}),
                           card.images[1].model_copy(update={"is_primary": True})]}
    )

    result = add_images_to_card(card, [make_record("c")])

    assert [img.is_primary for img in result.images] == [True, False, False]


def test_add_does_not_mutate_input():
    card = make_card("a")

    add_images_to_card(card, [make_record("b")])

    assert ids(card) == ["a"]
    assert card.image_count == 1


def test_merge_images_is_the_pure_add():
    assert merge_images is add_images_to_card


def test_remove_primary_promotes_next():
    card = make_card("A", "B", "C")

    result = remove_image_from_card(card, "A")

    assert ids(result) == ["B", "C"]
    assert result.images[0].is_primary is True
    assert result.images[1].order == 1
    assert_canonical(result)


def test_remove_last_image_clears_shadow_fields():
    result = remove_image_from_card(make_card("only"), "only")

    assert result.images == []
    assert_canonical(result)
    assert result.has_image is False


def test_remove_unknown_id_keeps_list():
    result = remove_image_from_card(make_card("a", "b"), "missing")

    assert ids(result) == ["a", "b"]
    assert_canonical(result)


def test_reorder_moves_single_element():
    card = make_card("a", "b", "c", "d")

    result = reorder_card_images(card, 0, 2)

    assert ids(result) == ["b", "c", "a", "d"]
    assert_canonical(result)


def test_reorder_same_index_is_noop():
    card = make_card("a", "b")

    assert reorder_card_images(card, 1, 1) is card


@pytest.mark.parametrize("i,j", [(0, 2), (2, 0), (1, 3), (3, 1), (0, 4), (4, 2)])
def test_reorder_round_trip(i, j):
    card = make_card("a", "b", "c", "d", "e")

    restored = reorder_card_images(reorder_card_images(card, i, j), j, i)

    assert ids(restored) == ids(card)
    assert_canonical(restored)


@pytest.mark.parametrize("i,j", [(-1, 0), (0, -1), (3, 0), (0, 3), (10, 1)])
def test_reorder_out_of_range_raises(i, j):
    card = make_card("a", "b", "c")

    with pytest.raises(ImageIndexError):
        reorder_card_images(card, i, j)


def test_reorder_index_error_is_an_index_error():
    with pytest.raises(IndexError):
        reorder_card_images(make_card("a"), 0, 1)


def test_update_patches_one_record_only():
    card = make_card("a", "b", "c")

    result = update_image_in_card(card, "b", {"caption": "Back side"})

    assert result.images[1].caption == "Back side"
    assert result.images[0].caption == ""
    assert ids(result) == ids(card)
    assert_canonical(result)


def test_update_accepts_camel_case_keys():
    card = make_card("a", "b")

    result = update_image_in_card(card, "a", {"isPrimary": False})

    assert result.images[0].is_primary is False
    assert result.primary_image_id is None
    assert result.image_url is None


def test_update_primary_flag_is_not_reflowed():
    """Moving the primary flag away from position 0 is left as is."""
    card = make_card("a", "b")
    card = update_image_in_card(card, "a", {"is_primary": False})

    result = update_image_in_card(card, "b", {"is_primary": True})

    assert [img.is_primary for img in result.images] == [False, True]
    assert result.primary_image_id == "b"
    assert result.image_url == result.images[1].url


def test_get_primary_prefers_flag_then_first():
    card = make_card("a", "b")
    assert get_primary_image(card).id == "a"

    flagged = update_image_in_card(update_image_in_card(card, "a", {"is_primary": False}),
                                   "b", {"is_primary": True})
    assert get_primary_image(flagged).id == "b"

    unflagged = update_image_in_card(card, "a", {"is_primary": False})
    assert get_primary_image(unflagged).id == "a"

    assert get_primary_image(make_card()) is None


def test_get_all_images_sorts_by_order():
    card = make_card("a", "b", "c")
    shuffled = card.model_copy(update={"images": [card.images[2], card.images[0], card.images[1]]})

    assert [img.id for img in get_all_images(shuffled)] == ["a", "b", "c"]
    assert ids(shuffled) == ["c", "a", "b"]


def test_migrate_legacy_single_image():
    card = CardDocument(card_name="Blastoise", image_url="https://cdn.test/legacy.jpg", has_image=True)

    result = migrate_legacy_image(card)

    assert len(result.images) == 1
    record = result.images[0]
    assert record.id.startswith("img_")
    assert record.url == "https://cdn.test/legacy.jpg"
    assert record.filename == "image.jpg"
    assert record.size == 0
    assert record.type == "image/jpeg"
    assert record.order == 0
    assert record.is_primary is True
    assert result.image_count == 1
    assert result.primary_image_id == record.id
    assert result.primary_image_url == "https://cdn.test/legacy.jpg"
    assert result.has_image is True


def test_migrate_is_idempotent():
    card = CardDocument(card_name="Blastoise", image_url="https://cdn.test/legacy.jpg")

    once = migrate_legacy_image(card)
    twice = migrate_legacy_image(once)

    assert twice == once


def test_migrate_leaves_populated_cards_alone():
    card = make_card("a", "b")

    assert migrate_legacy_image(card) is card


def test_migrate_card_without_any_image():
    result = migrate_legacy_image(CardDocument(card_name="Empty", has_image=True, image_count=3))

    assert result.images == []
    assert result.image_count == 0
    assert result.primary_image_id is None
    assert result.has_image is False


def test_normalize_raw_document():
    raw = {
        "id": "card-9",
        "cardName": "Gengar",
        "collection": {"id": "col-1", "name": "Spooky"},
        "imageUrl": "https://cdn.test/gengar.jpg",
        "images": None,
        "grade": "PSA 10",
    }

    card = normalize_card(raw)

    assert card.collection == "Spooky"
    assert card.images[0].url == "https://cdn.test/gengar.jpg"
    assert card.model_dump(by_alias=True)["grade"] == "PSA 10"


def test_structure_valid_card():
    card = make_card("a", "b")

    report = validate_card_structure(card.model_dump(by_alias=True))

    assert report.is_valid is True
    assert report.errors == []


def test_structure_reports_every_problem():
    raw = make_card("a", "b").model_dump(by_alias=True)
    raw["cardName"] = ""
    raw["imageCount"] = 5
    raw["primaryImageId"] = "ghost"

    report = validate_card_structure(raw)

    assert report.is_valid is False
    assert "Card name is required and must be a string" in report.errors
    assert "Image count does not match images array length" in report.errors
    assert "Primary image ID does not match any image in the array" in report.errors


def test_structure_too_many_images_and_bad_types():
    raw = make_card("a", "b", "c", "d", "e").model_dump(by_alias=True)
    raw["images"].append(make_record("f", 5).model_dump(by_alias=True))
    raw["imageCount"] = 6

    report = validate_card_structure(raw)
    assert report.errors == ["Maximum 5 images allowed per card"]

    report = validate_card_structure({"cardName": "x", "collection": "y", "images": "nope"})
    assert report.errors == ["Images must be an array"]

    report = validate_card_structure(None)
    assert report.errors == ["Card object is required"]


def test_add_past_ceiling_raises():
    card = make_card("a", "b", "c", "d", "e")

    with pytest.raises(ImageLimitError):
        add_images_to_card(card, [make_record("f")])

    assert card.image_count == 5


def test_add_respects_custom_ceiling():
    card = make_card("a", "b")

    with pytest.raises(ImageLimitError) as exc_info:
        add_images_to_card(card, [make_record("c"), make_record("d")], max_images=3)

    assert str(exc_info.value) == (
        "Cannot add 2 images. Maximum 3 images allowed per card (currently has 2)"
    )
    assert len(add_images_to_card(card, [make_record("c")], max_images=3).images) == 3


def test_reorder_empty_card_raises():
    with pytest.raises(ImageIndexError):
        reorder_card_images(make_card(), 0, 1)

    assert reorder_card_images(make_card(), 0, 0).images == []


def test_record_type_limited_to_jpeg_and_png():
    with pytest.raises(ValidationError):
        ImageRecord(id="img_1", filename="anim.gif", type="image/gif")

    assert ImageRecord(id="img_2", filename="scan.png", type="image/png").type == "image/png"
