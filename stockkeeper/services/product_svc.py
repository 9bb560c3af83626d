from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from ..domain.entities import PartialUpdate, ProductType
from ..repository import product_repo
from ..repository.entity_repo import Repository
from .reconcile_svc import Notifier, ReconcileResult, ReconciliationService


class ProductTypeService:
    """
    Product types carry their own reporting cadence. A stock update stamps
    last_notified, and due_for_update() lists the product types whose
    notification_interval has elapsed since then.
    """

    def __init__(
        self,
        repository: Repository[ProductType],
        notify: Optional[Notifier] = None,
        clock: Callable[[], datetime] = datetime.now,
        create_unknown: bool = False,
    ):
        self.repository = repository
        self._clock = clock
        self._reconciler = ReconciliationService(
            repository,
            product_repo.key_of,
            notify,
            create_record=lambda upd: ProductType(upd.key, **upd.fields),
            create_unknown=create_unknown,
            label="product type",
        )

    def get_all(self) -> List[ProductType]:
        return self.repository.get_all()

    def handle_new_product(self, product: ProductType) -> bool:
        return self._reconciler.handle_new_record(product)

    def handle_stock_update(self, changes: Iterable[PartialUpdate]) -> ReconcileResult:
        now = self._clock()
        stamped = [PartialUpdate(c.key, {**c.fields, "last_notified": now}) for c in changes]
        return self._reconciler.handle_log_form(stamped)

    def remove(self, name: str):
        self.repository.remove(name)

    def due_for_update(self, now: Optional[datetime] = None) -> List[ProductType]:
        now = now or self._clock()
        out = []
        for p in self.repository.get_all():
            if p.last_notified is None or now - p.last_notified >= timedelta(days=p.notification_interval):
                out.append(p)
        return out
