from datetime import datetime

import pytest

from stockkeeper.domain.entities import Item, User
from stockkeeper.repository import setting_repo, user_repo
from stockkeeper.services.email_svc import Email, EmailService
from stockkeeper.services.settings_svc import make_settings
from stockkeeper.services.user_svc import UserService

NOW = datetime(2024, 5, 1, 8, 30)


@pytest.fixture()
def settings():
    s = make_settings(setting_repo.make_memory_setting_repository())
    s.populate_defaults()
    return s


def make_service(users, settings, sent, regenerated=None):
    regenerated = regenerated if regenerated is not None else []

    def regen():
        regenerated.append(True)
        settings.set_inventory_form_stale(False)

    return EmailService(
        UserService(user_repo.make_memory_user_repository(users)),
        sent.append,
        settings,
        regen,
        clock=lambda: NOW,
    )


def test_inventory_form_goes_only_to_subscribers(settings):
    sent = []
    svc = make_service(
        [User("foo.bar@example.com", True, False), User("baz.qux@example.com", False, False)],
        settings,
        sent,
    )
    email = svc.send_inventory_form()
    assert sent == [email]
    assert email.to == ["foo.bar@example.com"]
    assert settings.get_inventory_form_last_sent() == NOW


def test_stale_form_is_regenerated_before_sending(settings):
    sent, regenerated = [], []
    svc = make_service([User("a@example.com", True)], settings, sent, regenerated)
    svc.send_inventory_form()
    svc.send_inventory_form()
    assert regenerated == [True]
    assert len(sent) == 2


def test_no_recipients_sends_nothing(settings):
    sent = []
    svc = make_service([User("a@example.com")], settings, sent)
    assert svc.send_inventory_form() is None
    assert svc.send_inventory_form_reply() is None
    assert svc.send_restock_report([Item("flour", 0, 1)]) is None
    assert sent == []


def test_form_links_come_from_settings(settings):
    settings.set("inventory form url", "https://forms.example.com/inventory")
    sent = []
    svc = make_service([User("a@example.com", True)], settings, sent)
    email = svc.send_inventory_form()
    assert "https://forms.example.com/inventory" in email.body_html


def test_reply_goes_to_reply_subscribers(settings):
    sent = []
    svc = make_service([User("r@example.com", wants_log_reply=True), User("x@example.com", True)], settings, sent)
    email = svc.send_inventory_form_reply()
    assert email.to == ["r@example.com"]


def test_restock_report_lists_low_items(settings):
    sent = []
    svc = make_service([User("boss@example.com", wants_report=True)], settings, sent)
    assert svc.send_restock_report([]) is None
    email = svc.send_restock_report([Item("<flour>", 1, 2)])
    assert email.to == ["boss@example.com"]
    assert "&lt;flour&gt;" in email.body_html


def test_email_accepts_single_recipient():
    assert Email("a@example.com").to == ["a@example.com"]
