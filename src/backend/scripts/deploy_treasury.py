#!/usr/bin/env python3
"""
deploy_treasury.py: Instantiate the treasury: create tables and the singleton
config with owner = deployer and no pending fee.

Refuses to run twice against the same database (AlreadyInstantiated).

Usage:
    cd src/backend && DATABASE_URL=... python scripts/deploy_treasury.py --owner juno1...
"""

import argparse
import asyncio
import sys
from pathlib import Path

_backend = str(Path(__file__).resolve().parents[1])
if _backend not in sys.path:
    sys.path.insert(0, _backend)

from database import async_session_maker, init_db
from errors import TreasuryError
from services.engine import ExecutionEngine
from services.store import TreasuryStore


async def deploy(owner: str) -> int:
    await init_db()
    async with async_session_maker() as session:
        engine = ExecutionEngine(TreasuryStore(session))
        try:
            await engine.instantiate(owner)
        except TreasuryError as exc:
            print(f"[!] Deploy failed: {exc.code}: {exc}")
            return 1
    print(f"[+] Treasury deployed. owner={owner}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Instantiate the treasury gateway")
    parser.add_argument("--owner", required=True, help="Deployer / initial owner address")
    args = parser.parse_args()
    sys.exit(asyncio.run(deploy(args.owner)))


if __name__ == "__main__":
    main()
