from __future__ import annotations

from typing import Iterable

from ..domain.entities import User
from .entity_repo import InMemoryRepository, TabularRepository
from .sheet_repo import Row, TabularRange, cell_yes_no, yes_no

SHEET = "users"
HEADERS = ["email", "wants log", "wants report", "wants log reply"]


def key_of(user: User) -> str:
    return user.email


def to_row(user: User) -> Row:
    return [user.email, yes_no(user.wants_log), yes_no(user.wants_report), yes_no(user.wants_log_reply)]


def from_row(row: Row) -> User:
    cells = list(row) + [""] * (len(HEADERS) - len(row))
    return User(cells[0], cell_yes_no(cells[1]), cell_yes_no(cells[2]), cell_yes_no(cells[3]))


def make_memory_user_repository(users: Iterable[User] = ()) -> InMemoryRepository[User]:
    repo = InMemoryRepository(key_of, lambda u: u.copy())
    for u in users:
        repo.add(u)
    return repo


def make_sheet_user_repository(table: TabularRange) -> TabularRepository[User]:
    return TabularRepository(table, key_of, to_row, from_row)
