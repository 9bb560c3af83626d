"""
Load items into the inventory sheet from a CSV.

With --reset the inventory sheet is emptied first (users and settings are not
touched).

Usage:
  python -m stockkeeper.scripts.seed_items --items seeds/items.csv [--namespace test] [--reset]
"""
from __future__ import annotations

import argparse

from stockkeeper.logs import LogContext
from stockkeeper.services.item_svc import seed_load
from stockkeeper.workspace import Workspace


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--items", required=True)
    ap.add_argument("--namespace", default="")
    ap.add_argument("--reset", action="store_true")
    args = ap.parse_args()

    ws = Workspace(namespace=args.namespace)
    ws.setup()
    if args.reset:
        svc = ws.item_service()
        for item in svc.get_all():
            svc.remove(item.name)

    with LogContext("SEED_ITEMS", user="script", db_path=ws.db_path) as log:
        log.set_payload({"items": args.items, "reset": args.reset})
        res = seed_load(ws.item_service(), args.items, log)
        ws.settings().set_inventory_form_stale(True)
    print({"message": "ok", **res})


if __name__ == "__main__":
    main()
