from __future__ import annotations

from typing import Iterable

from ..domain.entities import Item
from .entity_repo import InMemoryRepository, TabularRepository
from .sheet_repo import Row, TabularRange, cell_number

SHEET = "inventory"
HEADERS = ["name", "quantity", "minimum"]


def key_of(item: Item) -> str:
    return item.name


def to_row(item: Item) -> Row:
    return [item.name, item.quantity, item.minimum]


def from_row(row: Row) -> Item:
    cells = list(row) + [""] * (len(HEADERS) - len(row))
    # validation happens in Item itself
    return Item(cells[0], cell_number(cells[1], 0), cell_number(cells[2], 0))


def make_memory_item_repository(items: Iterable[Item] = ()) -> InMemoryRepository[Item]:
    repo = InMemoryRepository(key_of, lambda i: i.copy())
    for it in items:
        repo.add(it)
    return repo


def make_sheet_item_repository(table: TabularRange) -> TabularRepository[Item]:
    return TabularRepository(table, key_of, to_row, from_row)
