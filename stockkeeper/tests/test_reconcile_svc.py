from unittest.mock import MagicMock

import pytest

from stockkeeper.domain.entities import Item, PartialUpdate
from stockkeeper.errors import AnomalyWarning, NotFoundError
from stockkeeper.repository import item_repo
from stockkeeper.repository.sheet_repo import MemorySheet
from stockkeeper.services.item_svc import ItemService
from stockkeeper.services.reconcile_svc import ChangeEvent, ReconciliationService


def qty(name, q):
    return PartialUpdate(name, {"quantity": q})


@pytest.fixture()
def events():
    return []


@pytest.fixture()
def repo():
    return item_repo.make_memory_item_repository([Item("foo", 5, 3)])


@pytest.fixture()
def svc(repo, events):
    return ItemService(repo, notify=events.append)


def test_log_form_keeps_minimum(svc, repo):
    result = svc.handle_log_form([qty("foo", 8)])
    assert repo.get("foo") == Item("foo", 8, 3)
    assert result.updated == ["foo"]
    assert result.anomalies == []


def test_log_form_matches_keys_ignoring_case(svc, repo):
    svc.handle_log_form([qty("FOO", 6)])
    assert repo.get("foo").quantity == 6


def test_unknown_key_is_reported_and_dropped(svc, repo):
    result = svc.handle_log_form([qty("bar", 1)])
    assert not repo.has("bar")
    assert repo.get_all() == [Item("foo", 5, 3)]
    assert len(result.anomalies) == 1
    assert isinstance(result.anomalies[0], AnomalyWarning)
    assert result.anomalies[0].key == "bar"


def test_unknown_key_does_not_stop_the_batch(svc, repo):
    result = svc.handle_log_form([qty("bar", 1), qty("foo", 9)])
    assert repo.get("foo").quantity == 9
    assert [a.key for a in result.anomalies] == ["bar"]


def test_last_duplicate_wins(svc, repo):
    svc.handle_log_form([qty("foo", 8), qty("foo", 9)])
    assert repo.get("foo").quantity == 9


def test_negative_value_is_an_anomaly(svc, repo):
    result = svc.handle_log_form([qty("foo", -4)])
    assert repo.get("foo").quantity == 5
    assert [a.key for a in result.anomalies] == ["foo"]


@pytest.mark.parametrize("value", [float("nan"), float("inf"), "", None])
def test_unparsable_value_is_dropped_silently(svc, repo, value):
    result = svc.handle_log_form([qty("foo", value), qty("bar", value)])
    assert result.anomalies == []
    assert result.updated == []
    assert repo.get("foo").quantity == 5


def test_batch_of_only_unparsable_values_does_not_notify(events):
    repo = MagicMock()
    sut = ReconciliationService(repo, item_repo.key_of, events.append)
    sut.handle_log_form([qty("foo", float("nan"))])
    repo.get_all.assert_not_called()
    assert events == []


def test_unparsable_field_does_not_hide_the_others(svc, repo):
    svc.handle_log_form([PartialUpdate("foo", {"quantity": 7, "minimum": float("nan")})])
    assert repo.get("foo") == Item("foo", 7, 3)

def test_notifier_called_once_per_batch(svc, events):
    svc.handle_log_form([qty("foo", 8), qty("bar", 2)])
    assert events == [ChangeEvent("log_form", ["foo"])]


def test_empty_batch_is_noop(events):
    repo = MagicMock()
    sut = ReconciliationService(repo, item_repo.key_of, events.append)
    result = sut.handle_log_form([])
    assert result.updated == [] and result.anomalies == []
    repo.get_all.assert_not_called()
    repo.update.assert_not_called()
    assert events == []


def test_unchanged_records_are_not_written(events):
    repo = MagicMock()
    repo.get_all.return_value = [Item("foo", 5, 3), Item("bar", 1, 0)]
    sut = ReconciliationService(repo, item_repo.key_of, events.append)
    sut.handle_log_form([qty("foo", 5), qty("bar", 4)])
    repo.update.assert_called_once_with(Item("bar", 4, 0))


def test_persistence_failure_propagates_without_notifying(events):
    repo = MagicMock()
    repo.get_all.return_value = [Item("foo", 5, 3)]
    repo.update.side_effect = NotFoundError("foo", "update")
    sut = ReconciliationService(repo, item_repo.key_of, events.append)
    with pytest.raises(NotFoundError):
        sut.handle_log_form([qty("foo", 1)])
    assert events == []


def test_create_unknown_flag_adds_records(repo, events):
    svc = ItemService(repo, notify=events.append, create_unknown=True)
    result = svc.handle_log_form([qty("Bar", 2), qty("bar", 4)])
    assert repo.get("bar") == Item("Bar", 4, 0)
    assert result.created == ["Bar"]
    assert [a.key for a in result.anomalies] == ["Bar"]


def test_new_item_adds_then_replaces(svc, repo, events):
    assert svc.handle_new_item(Item("sugar", 1, 1)) is True
    assert svc.handle_new_item(Item("SUGAR", 4)) is False
    assert repo.get("sugar") == Item("SUGAR", 4, 0)
    assert [e.kind for e in events] == ["new_record", "new_record"]
    assert [e.created for e in events] == [True, False]


def test_log_form_over_sheet_backend(events):
    sheet = MemorySheet(item_repo.HEADERS, [["foo", 5, 3], ["baz", 1, 1]])
    svc = ItemService(item_repo.make_sheet_item_repository(sheet), notify=events.append)
    svc.handle_log_form([qty("foo", 8)])
    assert sheet.load()[1:] == [["foo", 8, 3], ["baz", 1, 1]]


def test_low_stock(repo):
    repo.add(Item("bar", 10, 2))
    repo.add(Item("baz", 0, 0))
    svc = ItemService(repo)
    assert sorted(i.name for i in svc.low_stock()) == ["baz"]
    repo.update(Item("foo", 3, 3))
    assert sorted(i.name for i in svc.low_stock()) == ["baz", "foo"]


def test_remove_missing_item_is_noop(svc, repo):
    svc.remove("nope")
    assert len(repo.get_all()) == 1
