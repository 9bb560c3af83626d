"""
Composes the emails the tracker sends. Delivery is injected: the API and CLI
hand emails to the SQLite outbox, tests hand them to a list.
"""
from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional

from ..db import get_conn
from ..domain.entities import Item
from ..repository import outbox_repo
from .reconcile_svc import ChangeEvent
from .settings_svc import Settings
from .user_svc import UserService

logger = logging.getLogger(__name__)

BANNER = "This email was generated by the stockkeeper inventory tracker."


@dataclass
class Email:
    to: List[str] = field(default_factory=list)
    subject: str = ""
    body_html: str = ""

    def __post_init__(self):
        if isinstance(self.to, str):
            self.to = [self.to]


def _paragraphs(lines: List[str]) -> str:
    return "\n".join(f"<p>{line}</p>" for line in lines)


def make_outbox_sender(db_path: str | None = None) -> Callable[[Email], Any]:
    def send(email: Email) -> int:
        with get_conn(db_path) as conn:
            outbox_repo.ensure_schema(conn)
            new_id = outbox_repo.add(conn, email.to, email.subject, email.body_html)
            conn.commit()
        logger.info("queued email %r for %d recipient(s)", email.subject, len(email.to))
        return new_id
    return send


class EmailService:
    def __init__(
        self,
        users: UserService,
        send_email: Callable[[Email], Any],
        settings: Settings,
        regenerate_inventory_form: Callable[[], Any],
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._users = users
        self._send = send_email
        self._settings = settings
        self._regenerate_inventory_form = regenerate_inventory_form
        self._clock = clock

    def send_inventory_form(self) -> Optional[Email]:
        if self._settings.is_inventory_form_stale():
            self._regenerate_inventory_form()

        to = self._users.stock_update_form_emails()
        if not to:
            return None

        s = self._settings
        lines = [
            BANNER,
            f"This form adds a new item to your inventory: {s.get_new_item_form_url()}",
            f"This form updates the items already recorded in your inventory: {s.get_inventory_form_url()}",
            f"This form removes an item from your inventory: {s.get_remove_item_form_url()}",
            f"You can view your inventory here: {s.get_workbook_url()}",
            f"You can change your notification preferences here: {s.get_user_form_url()}",
        ]
        email = Email(to, "It's time to update our inventory!", _paragraphs(lines))
        self._send(email)
        s.set_inventory_form_last_sent(self._clock())
        return email

    def send_inventory_form_reply(self, event: Optional[ChangeEvent] = None) -> Optional[Email]:
        to = self._users.log_reply_emails()
        if not to:
            return None
        lines = [
            BANNER,
            "Your inventory has been successfully updated!",
            f"You can see the result of these changes here: {self._settings.get_workbook_url()}",
            f"You can opt out of receiving this email here: {self._settings.get_user_form_url()}",
        ]
        email = Email(to, "Our inventory has been successfully updated!", _paragraphs(lines))
        self._send(email)
        return email

    def send_restock_report(self, low_stock: List[Item]) -> Optional[Email]:
        to = self._users.report_emails()
        if not to or not low_stock:
            return None
        rows = "\n".join(
            f"<tr><td>{html.escape(i.name)}</td><td>{i.quantity:g}</td><td>{i.minimum:g}</td></tr>"
            for i in low_stock
        )
        body = "\n".join([
            f"<p>{BANNER}</p>",
            f"<p>{len(low_stock)} item(s) are at or below their minimum:</p>",
            "<table>",
            "<tr><th>name</th><th>quantity</th><th>minimum</th></tr>",
            rows,
            "</table>",
            f"<p>You can view your inventory here: {self._settings.get_workbook_url()}</p>",
        ])
        email = Email(to, "Some items need restocking", body)
        self._send(email)
        return email
