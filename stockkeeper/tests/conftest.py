import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "stockkeeper_test.db"
    # Point stockkeeper to this temp DB
    os.environ["STOCK_DB_PATH"] = str(path)
    return str(path)


@pytest.fixture()
def workspace(tmp_db_path):
    from stockkeeper.workspace import Workspace, set_default_workspace
    ws = Workspace(namespace="test")
    ws.setup()
    set_default_workspace(ws)
    yield ws
    set_default_workspace(None)


@pytest.fixture()
def client(workspace):
    # Import app after the workspace is ready; startup hooks are not run by TestClient
    from stockkeeper.api import app
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("STOCK_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    tables = ["sheet_row", "operation_log", "email_outbox"]
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in tables:
            try:
                conn.execute(f"DELETE FROM {t}")
            except sqlite3.OperationalError:
                pass  # table not created yet
        conn.commit()
    finally:
        conn.close()
    yield
