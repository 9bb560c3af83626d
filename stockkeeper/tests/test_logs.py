import pytest

from stockkeeper.logs import LogContext, ensure_log_schema, search_operation_logs


def test_context_writes_ok_and_error(tmp_db_path):
    ensure_log_schema()
    with LogContext("ITEM_UPSERT", user="cli") as log:
        log.set_entity("ITEM", "Flour")
        log.set_after({"name": "Flour", "quantity": 3})

    with pytest.raises(ValueError):
        with LogContext("ITEM_UPSERT", user="cli"):
            raise ValueError("quantity cannot be negative")

    total, rows = search_operation_logs(None, "ITEM_UPSERT", None, None, 1, 10)
    assert total == 2
    assert [r["result"] for r in rows] == ["ERROR", "OK"]
    assert rows[0]["err_msg"] == "quantity cannot be negative"
    assert rows[1]["entity_id"] == "Flour"


def test_explicit_write_is_not_repeated(tmp_db_path):
    with LogContext("SETTINGS_UPDATE") as log:
        log.write("OK")
    total, _ = search_operation_logs(None, "SETTINGS_UPDATE", None, None, 1, 10)
    assert total == 1


def test_search_matches_snapshots(tmp_db_path):
    log = LogContext("INVENTORY_LOG")
    log.set_payload([{"name": "sugar", "quantity": 2}])
    log.write()
    total, rows = search_operation_logs("sugar", None, None, None, 1, 10)
    assert total == 1 and rows[0]["action"] == "INVENTORY_LOG"
    assert search_operation_logs("pepper", None, None, None, 1, 10)[0] == 0
