from datetime import datetime

import pytest

from stockkeeper.domain.entities import Item, ProductType, User
from stockkeeper.errors import ValidationError
from stockkeeper.repository import item_repo, product_repo, setting_repo, user_repo
from stockkeeper.services.form_svc import (
    FormDispatcher,
    FormKind,
    FormSubmission,
    parse_inventory_form,
    parse_new_item,
    parse_new_product,
    parse_number,
    parse_remove_item,
    parse_user_form,
)
from stockkeeper.services.item_svc import ItemService
from stockkeeper.services.product_svc import ProductTypeService
from stockkeeper.services.settings_svc import make_settings
from stockkeeper.services.user_svc import UserService

NOW = datetime(2024, 5, 1, 9, 0)


@pytest.mark.parametrize("text,expected", [("8", 8), (" 2.5 ", 2.5), ("", None), ("lots", None), ("nan", None), (None, None)])
def test_parse_number(text, expected):
    assert parse_number(text) == expected


def test_inventory_form_takes_last_answer_and_drops_non_numbers():
    updates = parse_inventory_form({
        "Timestamp": ["2024-01-01 10:00"],
        "flour": ["3", "8"],
        "sugar": ["a few"],
        "salt": [""],
        "yeast": "2",
    })
    assert [(u.key, u.fields) for u in updates] == [("flour", {"quantity": 8}), ("yeast", {"quantity": 2})]


def test_new_item_form():
    assert parse_new_item(["ts", "Flour", "4", "2"]) == Item("Flour", 4, 2)
    assert parse_new_item(["ts", "Salt", "", ""]) == Item("Salt", 0, 0)
    with pytest.raises(ValidationError):
        parse_new_item(["ts", "", "1", "1"])


def test_remove_item_form_uses_last_value():
    assert parse_remove_item(["ts", "", "", "flour"]) == "flour"


def test_user_form():
    assert parse_user_form(["ts", "a@example.com", "Yes", "No"]) == User("a@example.com", True, False, False)


def test_submission_kind_is_explicit():
    assert FormSubmission("inventory").kind is FormKind.INVENTORY
    with pytest.raises(ValueError):
        FormSubmission("Product name")


@pytest.fixture()
def dispatcher():
    settings = make_settings(setting_repo.make_memory_setting_repository())
    settings.populate_defaults()
    settings.set_inventory_form_stale(False)
    items = ItemService(item_repo.make_memory_item_repository([Item("flour", 5, 3)]))
    users = UserService(user_repo.make_memory_user_repository())
    products = ProductTypeService(
        product_repo.make_memory_product_repository([ProductType("Widget", 4, 1)]),
        clock=lambda: NOW,
    )
    return FormDispatcher(items, users, settings, products=products)


def test_dispatch_inventory(dispatcher):
    out = dispatcher.handle(FormSubmission(FormKind.INVENTORY, named_values={"flour": ["9"], "ghost": ["1"]}))
    assert out["updated"] == ["flour"]
    assert out["anomalies"][0]["key"] == "ghost"
    assert dispatcher.items.get("flour") == Item("flour", 9, 3)
    assert not dispatcher.settings.is_inventory_form_stale()


def test_dispatch_new_and_remove_mark_form_stale(dispatcher):
    dispatcher.handle(FormSubmission(FormKind.NEW_ITEM, values=["ts", "Sugar", "2", "1"]))
    assert dispatcher.items.get("sugar") == Item("Sugar", 2, 1)
    assert dispatcher.settings.is_inventory_form_stale()

    dispatcher.settings.set_inventory_form_stale(False)
    dispatcher.handle(FormSubmission(FormKind.REMOVE_ITEM, values=["ts", "sugar"]))
    assert not dispatcher.items.repository.has("sugar")
    assert dispatcher.settings.is_inventory_form_stale()


def test_dispatch_user(dispatcher):
    out = dispatcher.handle(FormSubmission(FormKind.USER, values=["ts", "a@example.com", "Yes", "Yes", "No"]))
    assert out["created"] is True
    assert dispatcher.users.stock_update_form_emails() == ["a@example.com"]


def test_new_product_form():
    assert parse_new_product(["ts", "Gadget", "3", "1", "14"]) == ProductType("Gadget", 3, 1, 14)
    assert parse_new_product(["ts", "Gadget", "", "", ""]) == ProductType("Gadget")


def test_dispatch_product_forms(dispatcher):
    out = dispatcher.handle(FormSubmission(FormKind.NEW_PRODUCT, values=["ts", "Gadget", "2", "1", "3"]))
    assert out["created"] is True

    out = dispatcher.handle(FormSubmission(FormKind.STOCK_UPDATE, named_values={"widget": ["0"], "Gadget": ["n/a"]}))
    assert out["updated"] == ["Widget"] and out["anomalies"] == []
    widget = dispatcher.products.repository.get("widget")
    assert widget.quantity == 0 and widget.last_notified == NOW
    assert [p.name for p in dispatcher.products.due_for_update()] == ["Gadget"]


def test_product_forms_need_a_product_service(dispatcher):
    dispatcher.products = None
    with pytest.raises(ValidationError):
        dispatcher.handle(FormSubmission(FormKind.STOCK_UPDATE, named_values={"widget": ["1"]}))
