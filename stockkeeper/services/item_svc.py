from __future__ import annotations

from typing import Iterable, List, Optional

import pandas as pd

from ..domain.entities import Item, PartialUpdate
from ..logs import LogContext
from ..repository import item_repo
from ..repository.entity_repo import Repository
from .reconcile_svc import Notifier, ReconcileResult, ReconciliationService


def _item_from_update(upd: PartialUpdate) -> Item:
    return Item(upd.key, **upd.fields)


class ItemService:
    """Business rules for Items: upserts, log-form reconciliation, restock checks."""

    def __init__(self, repository: Repository[Item], notify: Optional[Notifier] = None, create_unknown: bool = False):
        self.repository = repository
        self._reconciler = ReconciliationService(
            repository,
            item_repo.key_of,
            notify,
            create_record=_item_from_update,
            create_unknown=create_unknown,
            label="item",
        )

    def get_all(self) -> List[Item]:
        return self.repository.get_all()

    def get(self, name: str) -> Item:
        return self.repository.get(name)

    def handle_new_item(self, item: Item) -> bool:
        return self._reconciler.handle_new_record(item)

    def upsert(self, item: Item) -> bool:
        """Like handle_new_item, without notifying anyone. Used for bulk loads."""
        if self.repository.has(item.name):
            self.repository.update(item)
            return False
        self.repository.add(item)
        return True

    def handle_log_form(self, changes: Iterable[PartialUpdate]) -> ReconcileResult:
        return self._reconciler.handle_log_form(changes)

    def remove(self, name: str):
        self.repository.remove(name)

    def low_stock(self) -> List[Item]:
        return [i for i in self.repository.get_all() if i.is_low]


def seed_load(service: ItemService, items_csv: str, log: LogContext) -> dict:
    """Import items from CSV with columns: name, quantity, minimum.
       Existing items with the same name are replaced; blank numbers become 0.
    """
    df = pd.read_csv(items_csv)
    if "name" not in df.columns:
        raise ValueError("items csv must have a 'name' column")
    created = 0
    updated = 0
    for _, r in df.iterrows():
        name = str(r["name"]).strip()
        if not name or name.lower() == "nan":
            continue
        qty = r.get("quantity", 0)
        minimum = r.get("minimum", 0)
        item = Item(
            name,
            0 if pd.isna(qty) else float(qty),
            0 if pd.isna(minimum) else float(minimum),
        )
        if service.upsert(item):
            created += 1
        else:
            updated += 1
    log.set_after({"created_item": created, "updated_item": updated})
    return {"created_item": created, "updated_item": updated}
