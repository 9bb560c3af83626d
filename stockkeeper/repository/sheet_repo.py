"""Sheet-like tabular ranges.

A sheet is an ordered list of rows, each row a list of primitive cells. Row
indexes are 1-based and row 1 is always the header, the same way a hosted
spreadsheet addresses rows.
"""
from __future__ import annotations

import copy
from datetime import datetime
import json
from sqlite3 import Connection
from typing import Any, List, Optional, Protocol, Sequence

from ..db import get_conn

Row = List[Any]


class TabularRange(Protocol):
    def load(self) -> List[Row]: ...
    def append(self, row: Sequence[Any]) -> None: ...
    def write_row(self, index: int, row: Sequence[Any]) -> None: ...
    def delete_row(self, index: int) -> None: ...


def name_for(resource: str, namespace: str = "") -> str:
    """Sheet name for a resource within a namespace ("" is the default namespace)."""
    if not resource:
        raise ValueError("resource name is required")
    if namespace is None:
        raise ValueError("namespace cannot be None")
    return resource if namespace == "" else f"{namespace}-{resource}"


class MemorySheet:
    """Rows held in a list; used by tests and throwaway workspaces."""

    def __init__(self, headers: Sequence[Any] | None = None, rows: Sequence[Sequence[Any]] = ()):
        self._rows: List[Row] = []
        if headers is not None:
            self._rows.append(list(headers))
        for r in rows:
            self._rows.append(list(r))

    def load(self) -> List[Row]:
        return copy.deepcopy(self._rows)

    def append(self, row: Sequence[Any]) -> None:
        self._rows.append(list(row))

    def write_row(self, index: int, row: Sequence[Any]) -> None:
        self._check(index)
        self._rows[index - 1] = list(row)

    def delete_row(self, index: int) -> None:
        self._check(index)
        del self._rows[index - 1]

    def _check(self, index: int):
        if index < 1 or index > len(self._rows):
            raise IndexError(f"row {index} out of range (1..{len(self._rows)})")


# ---------------- SQLite-backed sheets ----------------

DDL = """
CREATE TABLE IF NOT EXISTS sheet_row (
  sheet TEXT NOT NULL,
  pos INTEGER NOT NULL,
  cells TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_sheet_row ON sheet_row(sheet, pos);
"""


def ensure_schema(conn: Connection):
    conn.executescript(DDL)


def _encode(row: Sequence[Any]) -> str:
    return json.dumps(list(row), ensure_ascii=False, default=str)


def sheet_exists(conn: Connection, sheet: str) -> bool:
    row = conn.execute("SELECT 1 FROM sheet_row WHERE sheet=? LIMIT 1", (sheet,)).fetchone()
    return row is not None


def list_sheets(conn: Connection) -> list[str]:
    return [r["sheet"] for r in conn.execute("SELECT DISTINCT sheet FROM sheet_row ORDER BY sheet").fetchall()]


def drop_sheet(conn: Connection, sheet: str):
    conn.execute("DELETE FROM sheet_row WHERE sheet=?", (sheet,))


def load_rows(conn: Connection, sheet: str) -> List[Row]:
    rows = conn.execute("SELECT cells FROM sheet_row WHERE sheet=? ORDER BY pos", (sheet,)).fetchall()
    return [json.loads(r["cells"]) for r in rows]


def append_row(conn: Connection, sheet: str, row: Sequence[Any]):
    last = conn.execute("SELECT COALESCE(MAX(pos), 0) AS p FROM sheet_row WHERE sheet=?", (sheet,)).fetchone()["p"]
    conn.execute("INSERT INTO sheet_row(sheet, pos, cells) VALUES(?,?,?)", (sheet, int(last) + 1, _encode(row)))


def write_row(conn: Connection, sheet: str, index: int, row: Sequence[Any]):
    cur = conn.execute("UPDATE sheet_row SET cells=? WHERE sheet=? AND pos=?", (_encode(row), sheet, index))
    if cur.rowcount == 0:
        raise IndexError(f"row {index} out of range in sheet {sheet!r}")


def delete_row(conn: Connection, sheet: str, index: int):
    cur = conn.execute("DELETE FROM sheet_row WHERE sheet=? AND pos=?", (sheet, index))
    if cur.rowcount == 0:
        raise IndexError(f"row {index} out of range in sheet {sheet!r}")
    conn.execute("UPDATE sheet_row SET pos = pos - 1 WHERE sheet=? AND pos>?", (sheet, index))


class SqliteSheet:
    """
    A named sheet stored in the sheet_row table. Each call opens its own
    connection and reads current state, so edits made by another process
    between calls are seen.
    """

    def __init__(self, name: str, db_path: Optional[str] = None):
        self.name = name
        self.db_path = db_path

    def load(self) -> List[Row]:
        with get_conn(self.db_path) as conn:
            return load_rows(conn, self.name)

    def append(self, row: Sequence[Any]) -> None:
        with get_conn(self.db_path) as conn:
            append_row(conn, self.name, row)
            conn.commit()

    def write_row(self, index: int, row: Sequence[Any]) -> None:
        with get_conn(self.db_path) as conn:
            write_row(conn, self.name, index, row)
            conn.commit()

    def delete_row(self, index: int) -> None:
        with get_conn(self.db_path) as conn:
            delete_row(conn, self.name, index)
            conn.commit()


def open_sheet(name: str, headers: Sequence[Any], db_path: Optional[str] = None) -> SqliteSheet:
    """Open a sheet, creating it with the given header row when missing."""
    with get_conn(db_path) as conn:
        ensure_schema(conn)
        if not sheet_exists(conn, name):
            append_row(conn, name, headers)
        conn.commit()
    return SqliteSheet(name, db_path)


# ---------------- cell helpers for row codecs ----------------

def blank_to_none(cell: Any) -> Any:
    """Empty cells come back as "" from a sheet; treat them as missing."""
    if cell is None:
        return None
    if isinstance(cell, str) and cell.strip() == "":
        return None
    return cell


def cell_number(cell: Any, default=None):
    v = blank_to_none(cell)
    if v is None:
        return default
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return v
    try:
        f = float(v)
    except (TypeError, ValueError):
        return v  # left for entity validation to reject
    return int(f) if f.is_integer() else f


def yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def cell_yes_no(cell: Any) -> bool:
    if isinstance(cell, bool):
        return cell
    return str(cell or "").strip().lower() == "yes"


def cell_datetime(cell: Any):
    v = blank_to_none(cell)
    if v is None or isinstance(v, datetime):
        return v
    return datetime.fromisoformat(str(v))


def datetime_cell(value) -> Any:
    return "" if value is None else value.isoformat()
