"""
FastAPI app entry point aggregating per-domain routers under stockkeeper/routes.
Keep as `uvicorn stockkeeper.api:app`.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI

from .logs import LogContext
from .workspace import default_workspace

logger = logging.getLogger(__name__)

app = FastAPI(title="stockkeeper-api", version="0.1.0")


@app.on_event("startup")
def on_startup():
    ws = default_workspace()
    ws.setup()
    try:
        reminder_routes.prime_reminders()
        reminder_routes.executor.start()
    except Exception as e:
        logger.exception("reminder scheduling failed")
        LogContext("STARTUP", db_path=ws.db_path).write("ERROR", f"prime_reminders_failed: {e}")


@app.on_event("shutdown")
def on_shutdown():
    reminder_routes.executor.shutdown()


# Include routers (split by business domain)
from .routes import base as base_routes
from .routes import items as item_routes
from .routes import users as user_routes
from .routes import settings as settings_routes
from .routes import forms as form_routes
from .routes import emails as email_routes
from .routes import products as product_routes
from .routes import reminders as reminder_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(item_routes.router)
app.include_router(user_routes.router)
app.include_router(settings_routes.router)
app.include_router(form_routes.router)
app.include_router(email_routes.router)
app.include_router(product_routes.router)
app.include_router(reminder_routes.router)
app.include_router(logs_routes.router)
