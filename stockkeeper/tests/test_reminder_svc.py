from apscheduler.schedulers.background import BackgroundScheduler

from stockkeeper.repository import setting_repo
from stockkeeper.services import settings_svc
from stockkeeper.services.reminder_svc import (
    APSchedulerReminders,
    Reminder,
    ReminderService,
    describe,
)
from stockkeeper.services.settings_svc import make_settings


def make_settings_with(**values):
    s = make_settings(setting_repo.make_memory_setting_repository())
    s.populate_defaults()
    for k, v in values.items():
        s.set(k, v)
    return s


class RecordingExecutor:
    def __init__(self):
        self.calls = []

    def create(self, reminder):
        self.calls.append(("create", reminder.name, reminder.interval))

    def delete(self, reminder):
        self.calls.append(("delete", reminder.name))


def make_service(settings, ex):
    return ReminderService(settings, ex.create, ex.delete, lambda: "form", lambda: "report")


def test_schedule_deletes_then_creates():
    ex = RecordingExecutor()
    svc = make_service(make_settings_with(), ex)
    reminder = svc.schedule_inventory_form()
    assert reminder.was_created
    assert ex.calls == [("delete", "Inventory form"), ("create", "Inventory form", 7)]
    assert reminder.fn() == "form"
    assert "every 7 days" in describe(reminder)


def test_blank_interval_only_deletes():
    ex = RecordingExecutor()
    svc = make_service(make_settings_with(**{settings_svc.INVENTORY_REPORT_INTERVAL: ""}), ex)
    reminder = svc.schedule_inventory_report()
    assert not reminder.was_created
    assert ex.calls == [("delete", "Inventory report")]
    assert "no longer" in describe(reminder)


def test_string_interval_is_parsed():
    ex = RecordingExecutor()
    svc = make_service(make_settings_with(**{settings_svc.INVENTORY_FORM_INTERVAL: "3"}), ex)
    svc.schedule_inventory_form()
    assert ex.calls[-1] == ("create", "Inventory form", 3)


def test_apscheduler_executor_replaces_jobs():
    executor = APSchedulerReminders(BackgroundScheduler(timezone="UTC"))
    reminder = Reminder("Inventory form", lambda: None, 7)
    executor.create(reminder)
    assert executor.scheduler.get_job(executor.job_id(reminder)) is not None
    executor.delete(reminder)
    assert executor.scheduler.get_job(executor.job_id(reminder)) is None
    executor.delete(reminder)  # deleting twice is fine
