from __future__ import annotations

from fastapi import APIRouter

from ..db import get_conn
from ..logs import LogContext
from ..repository import outbox_repo
from ..workspace import default_workspace
from .errors import http_error

router = APIRouter()


@router.post("/api/emails/inventory-form")
def api_send_inventory_form():
    ws = default_workspace()
    log = LogContext("SEND_INVENTORY_FORM", db_path=ws.db_path)
    try:
        email = ws.email_service().send_inventory_form()
    except Exception as e:
        raise http_error(e, log)
    log.set_after(None if email is None else {"to": email.to, "subject": email.subject})
    log.write("OK")
    return {"message": "ok", "sent": email is not None}


@router.post("/api/emails/restock-report")
def api_send_restock_report():
    ws = default_workspace()
    log = LogContext("SEND_RESTOCK_REPORT", db_path=ws.db_path)
    try:
        email = ws.email_service().send_restock_report(ws.item_service().low_stock())
    except Exception as e:
        raise http_error(e, log)
    log.set_after(None if email is None else {"to": email.to, "subject": email.subject})
    log.write("OK")
    return {"message": "ok", "sent": email is not None}


@router.get("/api/emails/outbox")
def api_outbox(limit: int = 50):
    with get_conn(default_workspace().db_path) as conn:
        outbox_repo.ensure_schema(conn)
        return {"items": outbox_repo.list_recent(conn, limit)}
