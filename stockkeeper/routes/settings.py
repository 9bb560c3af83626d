from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from ..logs import LogContext
from ..services.settings_svc import update_settings
from ..workspace import default_workspace
from .errors import http_error

router = APIRouter()


@router.get("/api/settings/get")
def api_settings_get():
    return default_workspace().settings().as_dict()


class SettingsUpdateBody(BaseModel):
    updates: dict


@router.post("/api/settings/update")
def api_settings_update(body: SettingsUpdateBody):
    ws = default_workspace()
    log = LogContext("SETTINGS_UPDATE", db_path=ws.db_path)
    log.set_payload(body.dict())
    try:
        updated_keys = update_settings(ws.settings(), body.updates, log)
    except Exception as e:
        raise http_error(e, log)
    log.write("OK")
    return {"message": "ok", "updated": updated_keys}
