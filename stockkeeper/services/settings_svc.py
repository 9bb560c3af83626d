# stockkeeper/services/settings_svc.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from ..domain.entities import Setting
from ..errors import NotFoundError
from ..logs import LogContext
from ..repository.entity_repo import Repository
from ..repository.sheet_repo import blank_to_none, cell_datetime, cell_yes_no, yes_no

INVENTORY_FORM_INTERVAL = "inventory form interval"
INVENTORY_FORM_LAST_SENT = "inventory form last sent"
INVENTORY_FORM_STALE = "inventory form is stale"
INVENTORY_REPORT_INTERVAL = "inventory report interval"
LOG_FORM_CREATES_ITEMS = "log form creates new items"
WORKBOOK_URL = "workbook url"
INVENTORY_FORM_URL = "inventory form url"
NEW_ITEM_FORM_URL = "new item form url"
REMOVE_ITEM_FORM_URL = "remove item form url"
USER_FORM_URL = "user form url"

DEFAULT_SETTINGS = [
    Setting(INVENTORY_FORM_INTERVAL, 7, "The number of days between sendings of the inventory form; blank disables it"),
    Setting(INVENTORY_FORM_LAST_SENT, None, "When the inventory form was last sent"),
    Setting(INVENTORY_FORM_STALE, "yes", "'yes' when the system will regenerate the inventory form before sending it"),
    Setting(INVENTORY_REPORT_INTERVAL, 7, "The number of days between restock reports; blank disables it"),
    Setting(LOG_FORM_CREATES_ITEMS, "no", "'yes' to add unknown items found in an inventory form instead of ignoring them"),
    Setting(WORKBOOK_URL, "", "Where the inventory can be viewed"),
    Setting(INVENTORY_FORM_URL, "", "Link to the inventory form"),
    Setting(NEW_ITEM_FORM_URL, "", "Link to the new item form"),
    Setting(REMOVE_ITEM_FORM_URL, "", "Link to the remove item form"),
    Setting(USER_FORM_URL, "", "Link to the notification preferences form"),
]
SETTING_NAMES = frozenset(s.name for s in DEFAULT_SETTINGS)


def parse_interval(value: Any) -> Optional[int]:
    """Interval in days, or None when the setting is blank or not a number."""
    v = blank_to_none(value)
    if v is None or isinstance(v, bool):
        return None
    try:
        return int(float(v))
    except (TypeError, ValueError, OverflowError):
        return None


class Settings:
    """
    Key-value settings with descriptions.

    Storage is injected as three functions so the same class runs against a
    sheet-backed repository or a plain dict:
      getter(name) -> Setting | None
      setter(name, value)
      define(setting)     only called for names getter does not know yet
    """

    def __init__(
        self,
        getter: Callable[[str], Optional[Setting]],
        setter: Callable[[str, Any], Any],
        define: Callable[[Setting], Any],
    ):
        self._get = getter
        self._set = setter
        self._define = define

    def populate_defaults(self):
        """Define every catalog setting that is missing; existing values are kept."""
        for s in DEFAULT_SETTINGS:
            if self._get(s.name) is None:
                self._define(s.copy())

    def get(self, name: str) -> Any:
        s = self._get(name)
        if s is None:
            raise NotFoundError(name)
        return s.value

    def set(self, name: str, value: Any):
        """Change a catalog setting. Names outside DEFAULT_SETTINGS raise NotFoundError."""
        if name not in SETTING_NAMES:
            raise NotFoundError(name, action="set")
        self._set(name, value)

    def as_dict(self) -> dict:
        out = {}
        for s in DEFAULT_SETTINGS:
            found = self._get(s.name)
            out[s.name] = found.value if found is not None else s.value
        return out

    # ---- typed accessors ----
    def get_inventory_form_interval(self) -> Optional[int]:
        return parse_interval(self.get(INVENTORY_FORM_INTERVAL))

    def get_inventory_report_interval(self) -> Optional[int]:
        return parse_interval(self.get(INVENTORY_REPORT_INTERVAL))

    def set_inventory_form_last_sent(self, when: datetime):
        self.set(INVENTORY_FORM_LAST_SENT, when.isoformat())

    def get_inventory_form_last_sent(self) -> Optional[datetime]:
        return cell_datetime(self.get(INVENTORY_FORM_LAST_SENT))

    def set_inventory_form_stale(self, is_stale: bool):
        self.set(INVENTORY_FORM_STALE, yes_no(is_stale))

    def is_inventory_form_stale(self) -> bool:
        return cell_yes_no(self.get(INVENTORY_FORM_STALE))

    def log_form_creates_items(self) -> bool:
        return cell_yes_no(self.get(LOG_FORM_CREATES_ITEMS))

    def get_workbook_url(self) -> str:
        return self.get(WORKBOOK_URL) or ""

    def get_inventory_form_url(self) -> str:
        return self.get(INVENTORY_FORM_URL) or ""

    def get_new_item_form_url(self) -> str:
        return self.get(NEW_ITEM_FORM_URL) or ""

    def get_remove_item_form_url(self) -> str:
        return self.get(REMOVE_ITEM_FORM_URL) or ""

    def get_user_form_url(self) -> str:
        return self.get(USER_FORM_URL) or ""


def make_settings(repo: Repository[Setting]) -> Settings:
    def getter(name: str) -> Optional[Setting]:
        return repo.get(name) if repo.has(name) else None

    def setter(name: str, value: Any):
        old = getter(name)
        if old is None:
            repo.add(Setting(name, value))
        else:
            repo.update(Setting(old.name, value, old.description))

    return Settings(getter, setter, repo.add)


def update_settings(settings: Settings, upd: dict, log: LogContext) -> list[str]:
    unknown = [k for k in upd if k not in SETTING_NAMES]
    if unknown:
        # nothing is written when any name is wrong
        raise NotFoundError(", ".join(unknown), action="update")
    before = settings.as_dict()
    updated = []
    for k, v in upd.items():
        settings.set(k, v)
        updated.append(k)
    log.set_before(before)
    log.set_after(settings.as_dict())
    return updated
