"""
Audit trail. Every state-changing API or CLI operation writes one row to
operation_log (who, what, before/after snapshots, outcome) and mirrors it to
the standard logger.
"""
import json, time, uuid, datetime as dt
import logging
from typing import Optional, Tuple, List, Dict, Any
from .db import get_conn

logger = logging.getLogger(__name__)

DDL = """
CREATE TABLE IF NOT EXISTS operation_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  user TEXT NOT NULL,
  action TEXT NOT NULL,
  entity_type TEXT,
  entity_id TEXT,
  request_id TEXT,
  before_json TEXT,
  after_json TEXT,
  payload_json TEXT,
  result TEXT,
  err_msg TEXT,
  latency_ms INTEGER
);
CREATE INDEX IF NOT EXISTS idx_log_ts ON operation_log(ts);
CREATE INDEX IF NOT EXISTS idx_log_action ON operation_log(action);
"""


def _dumps(obj) -> Optional[str]:
    if obj is None:
        return None
    return json.dumps(obj, ensure_ascii=False, default=str)


def ensure_log_schema(db_path: str | None = None):
    with get_conn(db_path) as conn:
        conn.executescript(DDL)
        conn.commit()


class LogContext:
    """
    One audited operation. Fill in entity/before/after/payload while working,
    then write() once. Used as a context manager it writes OK on exit, or
    ERROR with the exception text (the exception still propagates).
    """

    def __init__(self, action: str, user: str = "owner", db_path: str | None = None):
        self.action = action
        self.user = user
        self.db_path = db_path
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.before = self.after = self.payload = None
        self.entity_type = self.entity_id = None
        self.written = False

    def set_entity(self, etype: str, eid: str):
        self.entity_type = etype
        self.entity_id = eid

    def set_before(self, obj): self.before = obj
    def set_after(self, obj): self.after = obj
    def set_payload(self, obj): self.payload = obj

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if self.written:
            return False
        if exc is None:
            self.write("OK")
        else:
            self.write("ERROR", str(exc))
        return False

    def write(self, result: str = "OK", err: Optional[str] = None):
        rec = {
            "ts": dt.datetime.now(dt.timezone.utc).isoformat(),
            "user": self.user,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "request_id": self.request_id,
            "before_json": _dumps(self.before),
            "after_json": _dumps(self.after),
            "payload_json": _dumps(self.payload),
            "result": result,
            "err_msg": err,
            "latency_ms": int((time.perf_counter() - self.start) * 1000),
        }
        level = logging.INFO if result == "OK" else logging.WARNING
        logger.log(level, "%s %s/%s by %s: %s%s", self.action, self.entity_type or "-",
                   self.entity_id or "-", self.user, result, f" ({err})" if err else "")
        with get_conn(self.db_path) as conn:
            conn.executescript(DDL)
            conn.execute(
                f"INSERT INTO operation_log({','.join(rec)}) VALUES({','.join(':' + k for k in rec)})",
                rec,
            )
            conn.commit()
        self.written = True


def search_operation_logs(q: str|None, action: str|None, ts_from: str|None, ts_to: str|None,
                          page: int, size: int, db_path: str | None = None) -> Tuple[int, List[Dict[str, Any]]]:
    where = []
    params = {}
    if q:
        where.append("(payload_json LIKE :q OR before_json LIKE :q OR after_json LIKE :q)")
        params["q"] = f"%{q}%"
    if action:
        where.append("action = :action")
        params["action"] = action
    if ts_from:
        where.append("ts >= :from")
        params["from"] = ts_from
    if ts_to:
        where.append("ts <= :to")
        params["to"] = ts_to
    wh = " WHERE " + " AND ".join(where) if where else ""
    sql = f"SELECT * FROM operation_log{wh} ORDER BY ts DESC, id DESC LIMIT :limit OFFSET :offset"
    count_sql = f"SELECT COUNT(1) AS cnt FROM operation_log{wh}"
    with get_conn(db_path) as conn:
        total = conn.execute(count_sql, params).fetchone()["cnt"]
        rows = conn.execute(sql, {**params, "limit": size, "offset": (page-1)*size}).fetchall()
        return total, [dict(r) for r in rows]
