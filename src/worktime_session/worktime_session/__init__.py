"""Work session lifecycle and resolution engine.

Organized by feature modules (sessions, calculation, continuation, ledger,
resolution, monitoring) with thin Flask controllers over service and
repository layers. Session snapshots live in per-user JSON files; ledger
entries and continuation points live in MySQL.
"""
