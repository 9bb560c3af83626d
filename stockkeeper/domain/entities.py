"""
Inventory entities.

Item         name, quantity, minimum
ProductType  name, quantity, minimum, notification_interval, last_notified
User         email, wants_log, wants_report, wants_log_reply
Setting      name, value, description

Fields are validated in __post_init__, so an invalid entity never reaches a
repository. Names keep the casing they were entered with; repositories compare
them case-insensitively.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional

from ..errors import ValidationError

DEFAULT_NOTIFICATION_INTERVAL = 7  # days


def must_have_value(value, what: str):
    if value is None:
        raise ValidationError(f"{what} cannot be None")
    if isinstance(value, str) and not value.strip():
        raise ValidationError(f"{what} cannot be blank")


def must_be_number(value, what: str):
    ok = isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)
    if not ok:
        raise ValidationError(f"{what} must be a number: {value!r}")


def must_be_non_negative(value, what: str):
    must_be_number(value, what)
    if value < 0:
        raise ValidationError(f"{what} must be non-negative: {value}")


def must_be_positive(value, what: str):
    must_be_number(value, what)
    if value <= 0:
        raise ValidationError(f"{what} must be positive: {value}")


@dataclass
class Item:
    name: str
    quantity: float = 0
    minimum: float = 0

    def __post_init__(self):
        must_have_value(self.name, "name")
        self.name = str(self.name).strip()
        must_have_value(self.quantity, "quantity")
        must_be_non_negative(self.quantity, "quantity")
        must_have_value(self.minimum, "minimum")
        must_be_non_negative(self.minimum, "minimum")

    @property
    def is_low(self) -> bool:
        """True when the stock keeper should restock: quantity <= minimum."""
        return self.quantity <= self.minimum

    def copy(self) -> "Item":
        return replace(self)


@dataclass
class ProductType:
    name: str
    quantity: float = 0
    minimum: float = 0
    notification_interval: float = DEFAULT_NOTIFICATION_INTERVAL
    last_notified: Optional[datetime] = None

    def __post_init__(self):
        must_have_value(self.name, "name")
        self.name = str(self.name).strip()
        must_have_value(self.quantity, "quantity")
        must_be_non_negative(self.quantity, "quantity")
        must_have_value(self.minimum, "minimum")
        must_be_non_negative(self.minimum, "minimum")
        must_have_value(self.notification_interval, "notification_interval")
        must_be_positive(self.notification_interval, "notification_interval")

    @property
    def is_low(self) -> bool:
        return self.quantity <= self.minimum

    def copy(self) -> "ProductType":
        return replace(self)


@dataclass
class User:
    email: str
    wants_log: bool = False
    wants_report: bool = False
    wants_log_reply: bool = False

    def __post_init__(self):
        must_have_value(self.email, "email")
        self.email = str(self.email).strip()

    def copy(self) -> "User":
        return replace(self)


@dataclass
class Setting:
    name: str
    value: Any = None
    description: str = ""

    def __post_init__(self):
        must_have_value(self.name, "name")
        if self.description is None:
            self.description = ""

    def copy(self) -> "Setting":
        return replace(self)


@dataclass
class PartialUpdate:
    """A sparse update from a periodic form: a key plus only the fields it collected."""
    key: str
    fields: dict = field(default_factory=dict)
