from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter

from ..workspace import default_workspace

router = APIRouter()


@router.get("/api/products")
def api_products():
    """Product types; `due` marks those whose stock should be checked again."""
    svc = default_workspace().product_service()
    due = {p.name for p in svc.due_for_update()}
    return {"items": [{**asdict(p), "due": p.name in due} for p in svc.get_all()]}
