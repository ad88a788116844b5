"""Prepare a fresh environment: MySQL tables plus the session file directory.

Usage: python scripts/init_db.py [--env testing]
"""
from __future__ import annotations

import argparse
import importlib
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.worktime_session.worktime_session.database.bootstrap import apply_schema, list_tables

SCHEMA_PATH = REPO_ROOT / "database" / "schema.sql"
REQUIRED_TABLES = ("users", "worktime_entries", "continuation_points")


def _parse_args(argv):
    parser = argparse.ArgumentParser(description="Create worktime tables and the session directory.")
    parser.add_argument("--env", help="settings to use (development, production, testing); defaults to APP_ENV")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    if args.env:
        os.environ["APP_ENV"] = args.env
    settings = importlib.import_module(get_settings_module())

    db_config = dict(settings.DB_CONFIG)
    apply_schema(db_config, schema_path=SCHEMA_PATH)
    missing = sorted(set(REQUIRED_TABLES) - set(list_tables(db_config)))
    if missing:
        print(f"FAILED: {db_config.get('database')} is missing tables: {', '.join(missing)}")
        return 1

    session_dir = Path(settings.SESSION_DIR)
    session_dir.mkdir(parents=True, exist_ok=True)
    print(f"OK: tables ready in {db_config.get('database')}; session files in {session_dir.resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
