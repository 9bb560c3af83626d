from __future__ import annotations

from fastapi import APIRouter

from ..logs import LogContext
from ..services.reminder_svc import APSchedulerReminders, describe
from ..workspace import default_workspace
from .errors import http_error

router = APIRouter()

# one executor per process; api.py starts and stops it
executor = APSchedulerReminders()


def prime_reminders() -> list[str]:
    svc = default_workspace().reminder_service(executor.create, executor.delete)
    return [describe(svc.schedule_inventory_form()), describe(svc.schedule_inventory_report())]


@router.get("/api/reminders")
def api_reminders():
    jobs = executor.scheduler.get_jobs()
    return {
        "running": executor.scheduler.running,
        "items": [{"id": j.id, "name": j.name} for j in jobs],
    }


@router.post("/api/reminders/prime")
def api_reminders_prime():
    log = LogContext("PRIME_REMINDERS", db_path=default_workspace().db_path)
    try:
        messages = prime_reminders()
    except Exception as e:
        raise http_error(e, log)
    log.set_after(messages)
    log.write("OK")
    return {"message": "ok", "details": messages}
