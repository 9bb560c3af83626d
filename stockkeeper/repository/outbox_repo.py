import json
from sqlite3 import Connection


def ensure_schema(conn: Connection):
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS email_outbox (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            recipients TEXT NOT NULL,
            subject TEXT NOT NULL,
            body_html TEXT NOT NULL,
            created_at TEXT DEFAULT (datetime('now'))
        )
        """
    )


def add(conn: Connection, recipients: list[str], subject: str, body_html: str) -> int:
    cur = conn.execute(
        "INSERT INTO email_outbox(recipients, subject, body_html) VALUES(?,?,?)",
        (json.dumps(recipients), subject, body_html),
    )
    return int(cur.lastrowid)


def list_recent(conn: Connection, limit: int = 50) -> list[dict]:
    rows = conn.execute(
        "SELECT id, recipients, subject, body_html, created_at FROM email_outbox ORDER BY id DESC LIMIT ?",
        (limit,),
    ).fetchall()
    out = []
    for r in rows:
        d = dict(r)
        d["recipients"] = json.loads(d["recipients"])
        out.append(d)
    return out
