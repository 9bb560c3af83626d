"""
Automated reminders: sending the inventory form and the restock report every
N days. ReminderService decides what to schedule from the settings; the
executor that actually runs reminders is injected as create/delete functions.
APSchedulerReminders is the executor used by the API process.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .settings_svc import Settings, parse_interval

logger = logging.getLogger(__name__)

INVENTORY_FORM = "Inventory form"
INVENTORY_REPORT = "Inventory report"


@dataclass
class Reminder:
    """A function an executor should call every `interval` days."""
    name: str
    fn: Callable[[], Any]
    interval: Any
    was_created: bool = False

    def created(self):
        self.was_created = True


class ReminderService:
    def __init__(
        self,
        settings: Settings,
        create_reminder: Callable[[Reminder], Any],
        delete_reminder: Callable[[Reminder], Any],
        send_inventory_form: Callable[[], Any],
        send_inventory_report: Callable[[], Any],
    ):
        self._settings = settings
        self._create = create_reminder
        self._delete = delete_reminder
        self._send_inventory_form = send_inventory_form
        self._send_inventory_report = send_inventory_report

    def schedule_inventory_form(self) -> Reminder:
        interval = self._settings.get_inventory_form_interval()
        return self._schedule(Reminder(INVENTORY_FORM, self._send_inventory_form, interval))

    def schedule_inventory_report(self) -> Reminder:
        interval = self._settings.get_inventory_report_interval()
        return self._schedule(Reminder(INVENTORY_REPORT, self._send_inventory_report, interval))

    def _schedule(self, reminder: Reminder) -> Reminder:
        self._delete(reminder)
        days = parse_interval(reminder.interval)
        if days is not None and days > 0:
            reminder.interval = days
            self._create(reminder)
            reminder.created()
            logger.info("%s will be sent every %d days", reminder.name, days)
        else:
            logger.info("%s will no longer be sent automatically", reminder.name)
        return reminder


def describe(reminder: Reminder) -> str:
    if reminder.was_created:
        return f"The {reminder.name.lower()} will now be sent every {reminder.interval} days."
    return f"The {reminder.name.lower()} will no longer be automatically sent."


class APSchedulerReminders:
    """Runs reminders as interval jobs on an APScheduler background scheduler."""

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self.scheduler = scheduler or BackgroundScheduler(
            timezone="UTC",
            job_defaults={"coalesce": True, "max_instances": 1},
        )

    @staticmethod
    def job_id(reminder: Reminder) -> str:
        return "reminder:" + reminder.name.lower().replace(" ", "_")

    def create(self, reminder: Reminder):
        self.scheduler.add_job(
            reminder.fn,
            trigger=IntervalTrigger(days=int(reminder.interval)),
            id=self.job_id(reminder),
            name=reminder.name,
            replace_existing=True,
        )

    def delete(self, reminder: Reminder):
        if self.scheduler.get_job(self.job_id(reminder)) is not None:
            self.scheduler.remove_job(self.job_id(reminder))

    def start(self):
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("reminder scheduler started")

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
