#!/usr/bin/env python3
"""
inspect_treasury.py: Forensic dump of the treasury state.

Prints owner, pending platform fee, every bot role and the most recent audit
entries. Reconciles the fee ledger against the audit trail:

    pending_platform_fee == sum(BUY_TOKEN.platform_fee) - sum(WITHDRAW_FEE.amount)

Usage:
    cd src/backend && DATABASE_URL=... python scripts/inspect_treasury.py [--limit 20]
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

_backend = str(Path(__file__).resolve().parents[1])
if _backend not in sys.path:
    sys.path.insert(0, _backend)

from sqlalchemy import select
from database import async_session_maker
from errors import ConfigNotFound
from models import AuditLog
from services.store import TreasuryStore


async def inspect(limit: int) -> bool:
    """Returns True if the fee ledger reconciles with the audit trail."""
    async with async_session_maker() as session:
        store = TreasuryStore(session)
        try:
            state = await store.load()
        except ConfigNotFound:
            print("[!] Treasury not instantiated.")
            return True

        print(f"{'='*70}")
        print(f"TREASURY REPORT: owner={state.owner}")
        print(f"pending_platform_fee={state.pending_platform_fee}")
        print(f"{'='*70}")

        roles = await store.list_roles()
        print(f"\nBot roles ({len(roles)}):")
        for address, enabled in roles:
            print(f"  {'ON ' if enabled else 'OFF'} {address}")

        result = await session.execute(select(AuditLog).order_by(AuditLog.id.asc()))
        entries = result.scalars().all()

        accrued = 0
        withdrawn = 0
        for entry in entries:
            meta = json.loads(entry.metadata_json or "{}")
            if entry.action == "BUY_TOKEN":
                accrued += int(meta.get("platform_fee", "0"))
            elif entry.action == "WITHDRAW_FEE":
                withdrawn += int(meta.get("amount", "0"))

        print(f"\nLast {limit} audit entries:")
        for entry in entries[-limit:]:
            print(f"  #{entry.id} {entry.timestamp} {entry.caller} {entry.action} {entry.metadata_json}")

        expected = accrued - withdrawn
        if expected != state.pending_platform_fee:
            print(f"\n[!] FEE DRIFT: audit says {expected}, config says {state.pending_platform_fee}")
            return False
        print(f"\n[+] Fee ledger reconciles (accrued={accrued}, withdrawn={withdrawn}).")
        return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Inspect treasury state")
    parser.add_argument("--limit", type=int, default=20)
    args = parser.parse_args()
    ok = asyncio.run(inspect(args.limit))
    sys.exit(0 if ok else 1)
