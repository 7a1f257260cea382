# tests/test_catalog.py
import pytest
from pydantic import ValidationError

from app.catalog import MENU_ITEMS, get_item, items_by_category, price_of
from app.models import Category, Language


def test_ids_are_unique():
    ids = [item.id for item in MENU_ITEMS]
    assert len(ids) == len(set(ids))


def test_every_item_has_english_texts():
    for item in MENU_ITEMS:
        assert item.name[Language.EN]
        assert item.description[Language.EN]
        assert item.price >= 0


def test_price_lookup():
    assert price_of("cake1") == 20
    assert price_of("icecream1") == 6
    assert price_of("nope") is None
    assert get_item("nope") is None


def test_items_by_category():
    assert len(items_by_category()) == len(MENU_ITEMS)
    cakes = items_by_category(Category.CAKES)
    assert [item.id for item in cakes] == ["cake1", "cake2", "cake3"]
    assert items_by_category("catering")[0].id == "catering1"


def test_localized_name_falls_back_to_english():
    item = get_item("cake1")
    assert item.localized_name(Language.AR) == "كعكة الشوكولاتة"

    partial = item.model_copy(update={"name": {Language.EN: "Only English"}})
    assert partial.localized_name(Language.AM) == "Only English"


def test_menu_items_are_read_only():
    with pytest.raises(ValidationError):
        get_item("cake1").price = 1
