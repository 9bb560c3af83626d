from __future__ import annotations

from typing import Iterable

from ..domain.entities import Setting
from .entity_repo import InMemoryRepository, TabularRepository
from .sheet_repo import Row, TabularRange, blank_to_none

SHEET = "settings"
HEADERS = ["name", "value", "description"]


def key_of(setting: Setting) -> str:
    return setting.name


def to_row(setting: Setting) -> Row:
    return [setting.name, "" if setting.value is None else setting.value, setting.description]


def from_row(row: Row) -> Setting:
    cells = list(row) + [""] * (len(HEADERS) - len(row))
    return Setting(cells[0], blank_to_none(cells[1]), cells[2] or "")


def make_memory_setting_repository(settings: Iterable[Setting] = ()) -> InMemoryRepository[Setting]:
    repo = InMemoryRepository(key_of, lambda s: s.copy())
    for s in settings:
        repo.add(s)
    return repo


def make_sheet_setting_repository(table: TabularRange) -> TabularRepository[Setting]:
    return TabularRepository(table, key_of, to_row, from_row)
