#!/usr/bin/env python3
"""
issue_token.py: Mint a bearer token for a caller address (owner or bot).

Usage:
    cd src/backend && SECRET_KEY=... python scripts/issue_token.py juno1...
"""

import sys
from pathlib import Path

_backend = str(Path(__file__).resolve().parents[1])
if _backend not in sys.path:
    sys.path.insert(0, _backend)

from utils.jwt import create_access_token

if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: issue_token.py <address>")
        sys.exit(2)
    print(create_access_token(sys.argv[1]))
