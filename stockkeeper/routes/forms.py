from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ..logs import LogContext
from ..services.form_svc import FormKind, FormSubmission
from ..workspace import default_workspace
from .errors import http_error

router = APIRouter()


class FormSubmitBody(BaseModel):
    kind: FormKind
    values: list[Any] = Field(default_factory=list)
    named_values: dict[str, Any] = Field(default_factory=dict)


@router.get("/api/forms/inventory")
def api_inventory_form():
    ws = default_workspace()
    return {"questions": ws.inventory_form_questions(), "stale": ws.settings().is_inventory_form_stale()}


@router.post("/api/forms/inventory/regenerate")
def api_inventory_form_regenerate():
    return {"message": "ok", "questions": default_workspace().regenerate_inventory_form()}


@router.post("/api/forms/submit")
def api_form_submit(body: FormSubmitBody):
    ws = default_workspace()
    log = LogContext("FORM_SUBMIT", db_path=ws.db_path)
    log.set_payload(body.dict())
    try:
        sub = FormSubmission(body.kind, body.values, body.named_values)
        out = ws.form_dispatcher().handle(sub)
    except Exception as e:
        raise http_error(e, log)
    log.set_entity("FORM", body.kind.value)
    log.set_after(out)
    log.write("OK")
    return {"message": "ok", **out}
