from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Body
from pydantic import BaseModel, Field

from ..domain.entities import Item, PartialUpdate
from ..logs import LogContext
from ..workspace import default_workspace
from .errors import http_error

router = APIRouter()


class ItemCreate(BaseModel):
    name: str
    quantity: float = 0
    minimum: float = 0


class QuantityUpdate(BaseModel):
    name: str
    quantity: float


class LogBatch(BaseModel):
    items: list[QuantityUpdate] = Field(default_factory=list)


@router.get("/api/items")
def api_items():
    return {"items": [asdict(i) for i in default_workspace().item_service().get_all()]}


@router.get("/api/items/low-stock")
def api_items_low_stock():
    return {"items": [asdict(i) for i in default_workspace().item_service().low_stock()]}


@router.get("/api/items/{name}")
def api_item_get(name: str):
    try:
        return asdict(default_workspace().item_service().get(name))
    except Exception as e:
        raise http_error(e)


@router.post("/api/items", status_code=201)
def api_item_create(body: ItemCreate):
    ws = default_workspace()
    log = LogContext("ITEM_UPSERT", db_path=ws.db_path)
    log.set_payload(body.dict())
    try:
        item = Item(body.name, body.quantity, body.minimum)
        created = ws.item_service().handle_new_item(item)
        ws.settings().set_inventory_form_stale(True)
    except Exception as e:
        raise http_error(e, log)
    log.set_entity("ITEM", item.name)
    log.set_after(asdict(item))
    log.write("OK")
    return {"message": "ok", "created": created}


@router.post("/api/items/remove")
def api_item_remove(name: str = Body(..., embed=True)):
    ws = default_workspace()
    log = LogContext("ITEM_REMOVE", db_path=ws.db_path)
    log.set_entity("ITEM", name)
    try:
        ws.item_service().remove(name)
        ws.settings().set_inventory_form_stale(True)
    except Exception as e:
        raise http_error(e, log)
    log.write("OK")
    return {"message": "ok"}


@router.post("/api/items/log")
def api_items_log(body: LogBatch):
    ws = default_workspace()
    log = LogContext("INVENTORY_LOG", db_path=ws.db_path)
    log.set_payload(body.dict())
    try:
        result = ws.item_service().handle_log_form(
            [PartialUpdate(u.name, {"quantity": u.quantity}) for u in body.items]
        )
    except Exception as e:
        raise http_error(e, log)
    log.set_after(result.to_dict())
    log.write("OK")
    return {"message": "ok", **result.to_dict()}
