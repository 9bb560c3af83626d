"""Generic keyed-record repositories.

Both backends share one contract: keys compare case-insensitively, reads hand
back copies, update is a full replace and remove of a missing key is a no-op.
Entity-specific behavior (key extraction, copying, row codecs) is passed in as
functions rather than through subclasses.
"""
from __future__ import annotations

import copy
from typing import Any, Callable, Dict, Generic, List, Optional, Protocol, TypeVar

from ..errors import DuplicateKeyError, NotFoundError
from .sheet_repo import Row, TabularRange

T = TypeVar("T")


def normalize_key(key: str) -> str:
    return str(key).strip().lower()


class Repository(Protocol[T]):
    def add(self, record: T) -> None: ...
    def has(self, key: str) -> bool: ...
    def get(self, key: str) -> T: ...
    def get_all(self) -> List[T]: ...
    def update(self, record: T) -> None: ...
    def remove(self, key: str) -> None: ...


class InMemoryRepository(Generic[T]):
    """Records in a dict keyed by normalized key; iteration follows insertion order."""

    def __init__(
        self,
        key_of: Callable[[T], str],
        copy_record: Callable[[T], T] = copy.deepcopy,
        normalize: Callable[[str], str] = normalize_key,
    ):
        self._entities: Dict[str, T] = {}
        self._key_of = key_of
        self._copy = copy_record
        self._normalize = normalize

    def add(self, record: T) -> None:
        key = self._normalize(self._key_of(record))
        if key in self._entities:
            raise DuplicateKeyError(key)
        self._entities[key] = self._copy(record)

    def has(self, key: str) -> bool:
        return self._normalize(key) in self._entities

    def get(self, key: str) -> T:
        k = self._normalize(key)
        if k not in self._entities:
            raise NotFoundError(k)
        return self._copy(self._entities[k])

    def get_all(self) -> List[T]:
        return [self._copy(e) for e in self._entities.values()]

    def update(self, record: T) -> None:
        key = self._normalize(self._key_of(record))
        if key not in self._entities:
            raise NotFoundError(key, "update")
        self._entities[key] = self._copy(record)

    def remove(self, key: str) -> None:
        self._entities.pop(self._normalize(key), None)


class TabularRepository(Generic[T]):
    """
    Records stored as rows of a TabularRange; column 0 holds the key.

    Every operation loads the whole range first and scans it, nothing is cached
    between calls.
    """

    def __init__(
        self,
        table: TabularRange,
        key_of: Callable[[T], str],
        to_row: Callable[[T], Row],
        from_row: Callable[[Row], T],
        normalize: Callable[[str], str] = normalize_key,
    ):
        self._table = table
        self._key_of = key_of
        self._to_row = to_row
        self._from_row = from_row
        self._normalize = normalize

    def _data_rows(self) -> List[Row]:
        rows = self._table.load()
        return rows[1:]  # row 1 is the header

    def _find(self, key: str) -> Optional[int]:
        """Sheet row index (1-based, header included) of key, or None."""
        for i, row in enumerate(self._data_rows()):
            if row and self._normalize(_cell(row)) == key:
                return i + 2
        return None

    def add(self, record: T) -> None:
        key = self._normalize(self._key_of(record))
        if self._find(key) is not None:
            raise DuplicateKeyError(key)
        self._table.append(self._to_row(record))

    def has(self, key: str) -> bool:
        return self._find(self._normalize(key)) is not None

    def get(self, key: str) -> T:
        k = self._normalize(key)
        for row in self._data_rows():
            if row and self._normalize(_cell(row)) == k:
                return self._from_row(row)
        raise NotFoundError(k)

    def get_all(self) -> List[T]:
        return [self._from_row(r) for r in self._data_rows() if r and _cell(r) != ""]

    def update(self, record: T) -> None:
        key = self._normalize(self._key_of(record))
        idx = self._find(key)
        if idx is None:
            raise NotFoundError(key, "update")
        self._table.write_row(idx, self._to_row(record))

    def remove(self, key: str) -> None:
        idx = self._find(self._normalize(key))
        if idx is not None:
            self._table.delete_row(idx)


def _cell(row: Row) -> Any:
    v = row[0]
    return "" if v is None else v
