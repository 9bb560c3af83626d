"""
Workspace: the explicit context every service is built from.

A workspace is a namespace plus a database path. Sheets are named with
name_for(resource, namespace), so tests (or a second inventory) can live in
the same database without touching the default sheets. Only the outer
boundary (API app, CLI) reaches for default_workspace().
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .db import get_conn
from .logs import ensure_log_schema
from .repository import item_repo, outbox_repo, product_repo, setting_repo, sheet_repo, user_repo
from .repository.sheet_repo import SqliteSheet, name_for, open_sheet
from .services.email_svc import Email, EmailService, make_outbox_sender
from .services.form_svc import FormDispatcher
from .services.item_svc import ItemService
from .services.product_svc import ProductTypeService
from .services.reminder_svc import ReminderService
from .services.settings_svc import Settings, make_settings
from .services.user_svc import UserService

logger = logging.getLogger(__name__)

_SHEETS = [
    (item_repo.SHEET, item_repo.HEADERS),
    (product_repo.SHEET, product_repo.HEADERS),
    (user_repo.SHEET, user_repo.HEADERS),
    (setting_repo.SHEET, setting_repo.HEADERS),
]


@dataclass
class Workspace:
    namespace: str = ""
    db_path: Optional[str] = None

    def name_for(self, resource: str) -> str:
        return name_for(resource, self.namespace)

    def sheet(self, resource: str, headers: List[str]) -> SqliteSheet:
        return open_sheet(self.name_for(resource), headers, self.db_path)

    # ---------------- lifecycle ----------------
    def setup(self):
        """Create missing sheets and tables and seed default settings. Safe to repeat."""
        ensure_log_schema(self.db_path)
        with get_conn(self.db_path) as conn:
            outbox_repo.ensure_schema(conn)
            conn.commit()
        for resource, headers in _SHEETS:
            self.sheet(resource, headers)
        self.settings().populate_defaults()

    def delete(self):
        with get_conn(self.db_path) as conn:
            sheet_repo.ensure_schema(conn)
            for resource, _ in _SHEETS:
                sheet_repo.drop_sheet(conn, self.name_for(resource))
            conn.commit()

    # ---------------- repositories ----------------
    def item_repository(self):
        return item_repo.make_sheet_item_repository(self.sheet(item_repo.SHEET, item_repo.HEADERS))

    def product_repository(self):
        return product_repo.make_sheet_product_repository(self.sheet(product_repo.SHEET, product_repo.HEADERS))

    def user_repository(self):
        return user_repo.make_sheet_user_repository(self.sheet(user_repo.SHEET, user_repo.HEADERS))

    def setting_repository(self):
        return setting_repo.make_sheet_setting_repository(self.sheet(setting_repo.SHEET, setting_repo.HEADERS))

    # ---------------- services ----------------
    def settings(self) -> Settings:
        return make_settings(self.setting_repository())

    def user_service(self) -> UserService:
        return UserService(self.user_repository())

    def email_service(self, send_email: Optional[Callable[[Email], Any]] = None) -> EmailService:
        return EmailService(
            self.user_service(),
            send_email or make_outbox_sender(self.db_path),
            self.settings(),
            self.regenerate_inventory_form,
        )

    def item_service(self, send_email: Optional[Callable[[Email], Any]] = None) -> ItemService:
        emails = self.email_service(send_email)
        return ItemService(
            self.item_repository(),
            notify=emails.send_inventory_form_reply,
            create_unknown=self.settings().log_form_creates_items(),
        )

    def product_service(self) -> ProductTypeService:
        return ProductTypeService(self.product_repository())

    def form_dispatcher(self, send_email: Optional[Callable[[Email], Any]] = None) -> FormDispatcher:
        return FormDispatcher(
            self.item_service(send_email),
            self.user_service(),
            self.settings(),
            products=self.product_service(),
        )

    def reminder_service(self, create_reminder, delete_reminder) -> ReminderService:
        return ReminderService(
            self.settings(),
            create_reminder,
            delete_reminder,
            lambda: self.email_service().send_inventory_form(),
            lambda: self.email_service().send_restock_report(self.item_service().low_stock()),
        )

    # ---------------- inventory form ----------------
    def inventory_form_questions(self) -> List[str]:
        """One question per item, titled with the item name."""
        return [i.name for i in self.item_repository().get_all()]

    def regenerate_inventory_form(self) -> List[str]:
        questions = self.inventory_form_questions()
        self.settings().set_inventory_form_stale(False)
        logger.info("inventory form regenerated with %d question(s)", len(questions))
        return questions


_default: Optional[Workspace] = None


def default_workspace() -> Workspace:
    global _default
    if _default is None:
        _default = Workspace()
    return _default


def set_default_workspace(ws: Optional[Workspace]):
    global _default
    _default = ws
