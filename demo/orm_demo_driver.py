#!/usr/bin/env python3
"""blob-orm Demo Driver

Runs the table and record lifecycle against a directory-backed blob store
and prints the repository contents after each step.

Usage:
    python demo/orm_demo_driver.py --data-dir /tmp/orm-demo --codec delimited
"""

from __future__ import annotations

import argparse
import logging
import tempfile

from blob_orm import LocalBlobStore, ORMConfig, RecordEngine
from blob_orm.interfaces.engine import RecordStore

USERS = {
    "fields": {"name": "string", "age": "number", "email": "string"},
    "hashFields": ["name", "email"],
    "indexFields": ["email"],
}


def show(store: LocalBlobStore, label: str) -> None:
    """Print every blob path under the store root."""
    paths = sorted(
        p.relative_to(store.root).as_posix() for p in store.root.rglob("*") if p.is_file()
    )
    print(f"--- {label} ({len(paths)} blobs)")
    for path in paths:
        print(f"    {path}")


def run_lifecycle(orm: RecordStore, store: LocalBlobStore, clear: bool) -> None:
    """Walk a table through its whole lifecycle."""
    print("Testing createTable:")
    orm.register_schema("testTable", USERS)
    orm.create_table("testTable")
    show(store, "after create")

    print("Testing insertRecord:")
    record_hash = orm.insert_record(
        "testTable", {"name": "Alice Smith", "age": 25, "email": "alice@example.com"}
    )
    print(f"Inserted record {record_hash}")
    print(f"By field: {orm.get_record_by_field('testTable', 'email', 'alice@example.com')}")

    print("Testing updateRecordByHash:")
    print(f"Updated: {orm.update_record_by_hash('testTable', record_hash, {'age': 26})}")

    print("Testing modifyTable:")
    orm.modify_table("testTable", "renamedTestTable")
    show(store, "after rename")

    print("Testing deleteTableContents:")
    orm.delete_table_contents("renamedTestTable")
    show(store, "after clearing contents")

    print("Testing deleteTable:")
    orm.delete_table("renamedTestTable")
    show(store, "after delete")

    if clear:
        print("Testing clearRepo:")
        orm.clear_repo()
        show(store, "after clearRepo")


def run_demo(args: argparse.Namespace) -> None:
    """Run the demo workload."""
    store = LocalBlobStore(args.data_dir)
    config = ORMConfig(cache_size=args.cache_size, codec=args.codec)

    with RecordEngine(store, config) as orm:
        run_lifecycle(orm, store, args.clear)


def main() -> None:
    parser = argparse.ArgumentParser(description="blob-orm demo driver")
    parser.add_argument("--data-dir", default=None, help="Repository directory (default: a temp dir)")
    parser.add_argument("--codec", choices=["json", "delimited"], default="json")
    parser.add_argument("--cache-size", type=int, default=50)
    parser.add_argument("--clear", action="store_true", help="Run clear_repo at the end")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.data_dir is None:
        with tempfile.TemporaryDirectory() as tmpdir:
            args.data_dir = tmpdir
            run_demo(args)
    else:
        run_demo(args)


if __name__ == "__main__":
    main()
