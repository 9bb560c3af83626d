"""
Form submissions.

The integration layer states which form a submission came from (`kind`), and
the payload is read accordingly:
  values        ordered answers, values[0] is the submission timestamp
  named_values  {question title: [answers...]}; the last answer is current,
                earlier ones belong to older versions of the same form
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..domain.entities import Item, PartialUpdate, ProductType, User
from ..errors import ValidationError
from .item_svc import ItemService
from .product_svc import ProductTypeService
from .settings_svc import Settings
from .user_svc import UserService

logger = logging.getLogger(__name__)

TIMESTAMP = "Timestamp"


class FormKind(str, Enum):
    INVENTORY = "inventory"
    NEW_ITEM = "new_item"
    REMOVE_ITEM = "remove_item"
    USER = "user"
    NEW_PRODUCT = "new_product"
    STOCK_UPDATE = "stock_update"


@dataclass
class FormSubmission:
    kind: FormKind
    values: List[Any] = field(default_factory=list)
    named_values: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.kind = FormKind(self.kind)


def parse_number(text: Any) -> Optional[float]:
    """Number typed into a form field, or None when it is blank or not a number."""
    if isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return None if math.isnan(text) else text
    try:
        f = float(str(text).strip())
    except (TypeError, ValueError):
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return int(f) if f.is_integer() else f


def _last(answers: Any) -> Any:
    if isinstance(answers, (list, tuple)):
        return answers[-1] if answers else None
    return answers


def parse_inventory_form(named_values: Dict[str, Any]) -> List[PartialUpdate]:
    out = []
    for question, answers in named_values.items():
        if question == TIMESTAMP:
            continue
        qty = parse_number(_last(answers))
        if qty is None:
            logger.debug("skipping non-numeric answer for %s", question)
            continue
        out.append(PartialUpdate(question, {"quantity": qty}))
    return out


def parse_new_item(values: List[Any]) -> Item:
    answers = list(values[1:]) + [None, None, None]
    kwargs = {}
    qty = parse_number(answers[1])
    if qty is not None:
        kwargs["quantity"] = qty
    minimum = parse_number(answers[2])
    if minimum is not None:
        kwargs["minimum"] = minimum
    return Item(answers[0], **kwargs)


def parse_new_product(values: List[Any]) -> ProductType:
    answers = list(values[1:]) + [None, None, None, None]
    kwargs = {}
    for name, answer in zip(("quantity", "minimum", "notification_interval"), answers[1:4]):
        n = parse_number(answer)
        if n is not None:
            kwargs[name] = n
    return ProductType(answers[0], **kwargs)


def parse_remove_item(values: List[Any]) -> str:
    # every regeneration of the form inserts another blank answer after the
    # timestamp, so the current choice is always last
    return values[-1] if values else ""


def parse_user_form(values: List[Any]) -> User:
    answers = list(values[1:]) + [None, None, None, None]
    return User(
        answers[0],
        wants_log=answers[1] == "Yes",
        wants_report=answers[2] == "Yes",
        wants_log_reply=answers[3] == "Yes",
    )


class FormDispatcher:
    def __init__(
        self,
        items: ItemService,
        users: UserService,
        settings: Settings,
        products: Optional[ProductTypeService] = None,
    ):
        self.items = items
        self.users = users
        self.settings = settings
        self.products = products

    def handle(self, sub: FormSubmission) -> dict:
        logger.info("received %s form submission", sub.kind.value)
        if sub.kind is FormKind.INVENTORY:
            result = self.items.handle_log_form(parse_inventory_form(sub.named_values))
            return {"kind": sub.kind.value, **result.to_dict()}
        if sub.kind is FormKind.NEW_ITEM:
            item = parse_new_item(sub.values)
            added = self.items.handle_new_item(item)
            self.settings.set_inventory_form_stale(True)
            return {"kind": sub.kind.value, "name": item.name, "created": added}
        if sub.kind is FormKind.REMOVE_ITEM:
            name = parse_remove_item(sub.values)
            self.items.remove(name)
            self.settings.set_inventory_form_stale(True)
            return {"kind": sub.kind.value, "name": name}
        if sub.kind in (FormKind.NEW_PRODUCT, FormKind.STOCK_UPDATE):
            return self._handle_product(sub)
        user = parse_user_form(sub.values)
        added = self.users.handle_user_form(user)
        return {"kind": sub.kind.value, "email": user.email, "created": added}

    def _handle_product(self, sub: FormSubmission) -> dict:
        if self.products is None:
            raise ValidationError(f"{sub.kind.value} forms need a product type service")
        if sub.kind is FormKind.NEW_PRODUCT:
            product = parse_new_product(sub.values)
            added = self.products.handle_new_product(product)
            return {"kind": sub.kind.value, "name": product.name, "created": added}
        # the stock update form has one question per product type, like the inventory form
        result = self.products.handle_stock_update(parse_inventory_form(sub.named_values))
        return {"kind": sub.kind.value, **result.to_dict()}
