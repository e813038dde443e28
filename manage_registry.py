#!/usr/bin/env python3
"""
Inspect a Pet Registry SQLite database from the command line.

This script only reads: it never changes pets, reports or the
identifier counter.

Usage:
    python manage_registry.py --db ./pet_registry_api/pet_registry.db stats
    python manage_registry.py --db ./pet_registry_api/pet_registry.db dump pets
    python manage_registry.py --db ./pet_registry_api/pet_registry.db dump found-reports

``dump`` writes one JSON object per line to stdout.
"""

import argparse
import os
import sys
from typing import List, Optional

from pet_registry_api.app.core.config import settings
from pet_registry_api.app.core.db import open_database
from pet_registry_api.app.core.exceptions import StorageError
from pet_registry_api.app.services.registry_service import PetRegistryService


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Inspect a Pet Registry database (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./pet_registry_api/pet_registry.db)")
    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("stats", help="Print pet, lost pet and found report counts")
    dump = sub.add_parser("dump", help="Print stored records as JSON lines")
    dump.add_argument("what", choices=["pets", "found-reports"])
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        return 1

    database = open_database(os.path.abspath(args.db))
    try:
        registry = PetRegistryService.from_database(database, settings)
        if args.command == "stats":
            for key, value in registry.stats().items():
                print(f"{key}: {value}")
        elif args.what == "pets":
            for pet in registry.list_all():
                print(pet.model_dump_json())
        else:
            for report in registry.found_reports:
                print(report.model_dump_json())
    except StorageError as exc:
        print(f"[!] Stored data could not be read: {exc}", file=sys.stderr)
        return 2
    finally:
        database.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
