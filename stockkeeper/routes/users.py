from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Body
from pydantic import BaseModel

from ..domain.entities import User
from ..logs import LogContext
from ..workspace import default_workspace
from .errors import http_error

router = APIRouter()


class UserBody(BaseModel):
    email: str
    wants_log: bool = False
    wants_report: bool = False
    wants_log_reply: bool = False


@router.get("/api/users")
def api_users():
    return {"items": [asdict(u) for u in default_workspace().user_service().get_all()]}


@router.post("/api/users")
def api_user_upsert(body: UserBody):
    ws = default_workspace()
    log = LogContext("USER_UPSERT", db_path=ws.db_path)
    log.set_payload(body.dict())
    try:
        created = ws.user_service().handle_user_form(User(**body.dict()))
    except Exception as e:
        raise http_error(e, log)
    log.set_entity("USER", body.email)
    log.write("OK")
    return {"message": "ok", "created": created}


@router.post("/api/users/remove")
def api_user_remove(email: str = Body(..., embed=True)):
    ws = default_workspace()
    log = LogContext("USER_REMOVE", db_path=ws.db_path)
    log.set_entity("USER", email)
    try:
        ws.user_service().remove(email)
    except Exception as e:
        raise http_error(e, log)
    log.write("OK")
    return {"message": "ok"}
