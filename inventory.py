#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Inventory tracker (SQLite sheets)

Commands:
  init                Create the sheets and seed the default settings
  add-item            Add an item, or replace the one with the same name
  log                 Record current quantities, e.g. `log flour=8 sugar=2`
  remove-item         Remove an item (no-op when it does not exist)
  report              Print all items and the low-stock ones; export both as CSV
  send-form           Queue the inventory form email for subscribed users

Notes:
- Names are case-insensitive: "Flour" and "flour" are the same item.
- `log` only changes quantities. Unknown names are reported and skipped unless
  the "log form creates new items" setting is "yes".
"""

import argparse
import logging
import os
from dataclasses import asdict

import pandas as pd
import yaml

from stockkeeper.domain.entities import Item, PartialUpdate
from stockkeeper.logs import LogContext
from stockkeeper.services.form_svc import parse_number
from stockkeeper.workspace import Workspace, set_default_workspace

# ---------------- CFG helpers ----------------

def read_cfg(path: str = "config.yaml") -> dict:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def open_workspace(args) -> Workspace:
    cfg = read_cfg(args.config)
    ws = Workspace(namespace=args.namespace, db_path=cfg.get("db_path"))
    set_default_workspace(ws)
    ws.setup()
    return ws


# ---------------- Commands ----------------

def cmd_init(args):
    ws = open_workspace(args)
    print(f"Workspace ready (namespace={ws.namespace!r})")


def cmd_add_item(args):
    ws = open_workspace(args)
    with LogContext("ITEM_UPSERT", user="cli", db_path=ws.db_path) as log:
        log.set_payload({"name": args.name, "quantity": args.quantity, "minimum": args.minimum})
        item = Item(args.name, args.quantity, args.minimum)
        log.set_entity("ITEM", item.name)
        created = ws.item_service().handle_new_item(item)
        ws.settings().set_inventory_form_stale(True)
    print(("Added " if created else "Updated ") + item.name)


def cmd_log(args):
    ws = open_workspace(args)
    updates = []
    for pair in args.pairs:
        name, _, raw = pair.partition("=")
        qty = parse_number(raw)
        if not name or qty is None:
            print(f"skipping {pair!r}: expected name=quantity")
            continue
        updates.append(PartialUpdate(name, {"quantity": qty}))
    with LogContext("INVENTORY_LOG", user="cli", db_path=ws.db_path) as log:
        log.set_payload([{"name": u.key, **u.fields} for u in updates])
        result = ws.item_service().handle_log_form(updates)
        log.set_after(result.to_dict())
    print(f"updated: {', '.join(result.updated) or '-'}")
    if result.created:
        print(f"created: {', '.join(result.created)}")
    for a in result.anomalies:
        print(f"warning: {a.message}")


def cmd_remove_item(args):
    ws = open_workspace(args)
    with LogContext("ITEM_REMOVE", user="cli", db_path=ws.db_path) as log:
        log.set_entity("ITEM", args.name)
        ws.item_service().remove(args.name)
        ws.settings().set_inventory_form_stale(True)
    print(f"Removed {args.name}")


def cmd_report(args):
    ws = open_workspace(args)
    svc = ws.item_service()
    items = pd.DataFrame([asdict(i) for i in svc.get_all()], columns=["name", "quantity", "minimum"])
    low = pd.DataFrame([asdict(i) for i in svc.low_stock()], columns=["name", "quantity", "minimum"])

    pd.set_option("display.max_rows", 200)
    pd.set_option("display.width", 160)

    print("\n=== Inventory ===")
    print(items if not items.empty else "(empty)")
    print("\n=== Low stock ===")
    print(low if not low.empty else "(none)")

    out_dir = args.out or os.path.join(os.path.dirname(os.path.abspath(__file__)), "exports")
    os.makedirs(out_dir, exist_ok=True)
    items.to_csv(os.path.join(out_dir, "inventory.csv"), index=False, encoding="utf-8-sig")
    low.to_csv(os.path.join(out_dir, "low_stock.csv"), index=False, encoding="utf-8-sig")
    print(f"\nCSV exported to {out_dir}")


def cmd_send_form(args):
    ws = open_workspace(args)
    email = ws.email_service().send_inventory_form()
    if email is None:
        print("Nobody wants the inventory form; nothing sent.")
    else:
        print(f"Queued inventory form for {', '.join(email.to)}")


# ---------------- Entry ----------------

def main():
    parser = argparse.ArgumentParser(description="Inventory tracker (SQLite sheets)")
    parser.add_argument("--config", default="config.yaml")
    parser.add_argument("--namespace", default="", help="sheet namespace, e.g. for a test inventory")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create sheets and default settings")
    p_init.set_defaults(func=cmd_init)

    p_add = sub.add_parser("add-item", help="add or replace an item")
    p_add.add_argument("--name", required=True)
    p_add.add_argument("--quantity", type=float, default=0)
    p_add.add_argument("--minimum", type=float, default=0)
    p_add.set_defaults(func=cmd_add_item)

    p_log = sub.add_parser("log", help="record current quantities")
    p_log.add_argument("pairs", nargs="+", help="name=quantity")
    p_log.set_defaults(func=cmd_log)

    p_rm = sub.add_parser("remove-item", help="remove an item")
    p_rm.add_argument("--name", required=True)
    p_rm.set_defaults(func=cmd_remove_item)

    p_rep = sub.add_parser("report", help="print and export inventory")
    p_rep.add_argument("--out", required=False, help="export directory (default ./exports)")
    p_rep.set_defaults(func=cmd_report)

    p_send = sub.add_parser("send-form", help="queue the inventory form email")
    p_send.set_defaults(func=cmd_send_form)

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
