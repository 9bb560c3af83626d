"""
Upsert-by-diff reconciliation.

Periodic forms only collect a few mutable fields per record (for the inventory
form, just the quantity). ReconciliationService merges those sparse updates
into the full stored records so that fields the form never asks about, such as
the minimum, survive the round trip.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields as dc_fields, replace
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from ..domain.entities import PartialUpdate
from ..errors import AnomalyWarning, ValidationError
from ..repository.entity_repo import Repository, normalize_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ChangeEvent:
    """Handed to the notifier after a batch or a single record was persisted."""
    kind: str  # "log_form" | "new_record"
    keys: List[str] = field(default_factory=list)
    created: bool = False


Notifier = Callable[[ChangeEvent], Any]


@dataclass
class ReconcileResult:
    updated: List[str] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    anomalies: List[AnomalyWarning] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "updated": list(self.updated),
            "created": list(self.created),
            "anomalies": [a.to_dict() for a in self.anomalies],
        }


def drop_unparsable(values: dict) -> dict:
    """Leave out fields whose value is blank, NaN or infinite."""
    out = {}
    for name, v in values.items():
        if v is None or (isinstance(v, str) and not v.strip()):
            continue
        if isinstance(v, float) and not math.isfinite(v):
            continue
        out[name] = v
    return out


def merge_fields(record: T, values: dict) -> T:
    """Copy of record with only the given fields overwritten, validated again."""
    known = {f.name for f in dc_fields(record)}
    unknown = set(values) - known
    if unknown:
        raise ValidationError(f"unknown field(s): {', '.join(sorted(unknown))}")
    return replace(record, **values)


class ReconciliationService(Generic[T]):
    def __init__(
        self,
        repository: Repository[T],
        key_of: Callable[[T], str],
        notify: Optional[Notifier] = None,
        *,
        create_record: Optional[Callable[[PartialUpdate], T]] = None,
        create_unknown: bool = False,
        merge: Callable[[T, dict], T] = merge_fields,
        label: str = "record",
    ):
        self.repository = repository
        self._key_of = key_of
        self._notify = notify
        self._create = create_record
        self.create_unknown = create_unknown
        self._merge = merge
        self.label = label

    def _anomaly(self, result: ReconcileResult, key: str, message: str):
        anomaly = AnomalyWarning(key, message)
        logger.warning(message)
        result.anomalies.append(anomaly)

    def handle_log_form(self, updates: Iterable[PartialUpdate]) -> ReconcileResult:
        # unparsable values are dropped before anything is read, so an update
        # left without fields does not count toward the batch
        cleaned = []
        for u in updates:
            values = drop_unparsable(u.fields)
            if values:
                cleaned.append(PartialUpdate(u.key, values))
        updates = cleaned
        result = ReconcileResult()
        if not updates:
            return result

        current: Dict[str, T] = {}
        for rec in self.repository.get_all():
            current[normalize_key(self._key_of(rec))] = rec
        changed: Dict[str, T] = {}
        created: Dict[str, T] = {}

        for upd in updates:
            k = normalize_key(upd.key)
            if k not in current:
                self._anomaly(
                    result, upd.key,
                    f"Log form contains unknown {self.label}: {upd.key}. Maybe regenerate the inventory form?",
                )
                if not (self.create_unknown and self._create is not None):
                    continue
                try:
                    rec = self._create(upd)
                except ValidationError as e:
                    self._anomaly(result, upd.key, f"Cannot create {self.label} {upd.key}: {e}")
                    continue
                current[k] = rec
                created[k] = rec
                continue

            try:
                merged = self._merge(current[k], dict(upd.fields))
            except ValidationError as e:
                self._anomaly(result, upd.key, f"Ignoring update for {self.label} {upd.key}: {e}")
                continue
            if k in created:
                created[k] = merged
            elif merged != current[k]:
                changed[k] = merged
            current[k] = merged

        for rec in changed.values():
            self.repository.update(rec)
            result.updated.append(self._key_of(rec))
        for rec in created.values():
            self.repository.add(rec)
            result.created.append(self._key_of(rec))

        logger.info(
            "reconciled %d %s update(s): %d updated, %d created, %d anomalies",
            len(updates), self.label, len(result.updated), len(result.created), len(result.anomalies),
        )
        if self._notify is not None:
            self._notify(ChangeEvent("log_form", result.updated + result.created))
        return result

    def handle_new_record(self, record: T) -> bool:
        """Add record, or replace the stored one with the same key. Returns True when added."""
        key = self._key_of(record)
        if self.repository.has(key):
            self.repository.update(record)
            added = False
        else:
            self.repository.add(record)
            added = True
        if self._notify is not None:
            self._notify(ChangeEvent("new_record", [key], created=added))
        return added
