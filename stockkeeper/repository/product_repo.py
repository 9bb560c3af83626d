from __future__ import annotations

from typing import Iterable

from ..domain.entities import DEFAULT_NOTIFICATION_INTERVAL, ProductType
from .entity_repo import InMemoryRepository, TabularRepository
from .sheet_repo import Row, TabularRange, cell_datetime, cell_number, datetime_cell

SHEET = "product types"
HEADERS = ["name", "quantity", "minimum", "notification interval", "last notified"]


def key_of(pt: ProductType) -> str:
    return pt.name


def to_row(pt: ProductType) -> Row:
    return [pt.name, pt.quantity, pt.minimum, pt.notification_interval, datetime_cell(pt.last_notified)]


def from_row(row: Row) -> ProductType:
    cells = list(row) + [""] * (len(HEADERS) - len(row))
    return ProductType(
        cells[0],
        cell_number(cells[1], 0),
        cell_number(cells[2], 0),
        cell_number(cells[3], DEFAULT_NOTIFICATION_INTERVAL),
        cell_datetime(cells[4]),
    )


def make_memory_product_repository(products: Iterable[ProductType] = ()) -> InMemoryRepository[ProductType]:
    repo = InMemoryRepository(key_of, lambda p: p.copy())
    for p in products:
        repo.add(p)
    return repo


def make_sheet_product_repository(table: TabularRange) -> TabularRepository[ProductType]:
    return TabularRepository(table, key_of, to_row, from_row)
