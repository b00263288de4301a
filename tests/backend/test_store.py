"""Tests for the persistence collaborator.

Proves:
  1. Uint128 fee values survive a round trip exactly (no float rounding)
  2. Missing role entry (None) and disabled entry (False) stay distinct
  3. Nothing staged before rollback() is visible afterwards
"""

import pytest

from errors import ConfigNotFound
from services.state import TreasuryState
from services.uint import UINT128_MAX

pytestmark = pytest.mark.asyncio


async def test_load_without_config(store):
    with pytest.raises(ConfigNotFound):
        await store.load()
    assert await store.exists() is False


async def test_uint128_round_trip_is_exact(store):
    await store.create(TreasuryState(owner="juno1owner"))
    await store.commit()

    await store.save(TreasuryState(owner="juno1owner", pending_platform_fee=UINT128_MAX))
    await store.commit()

    state = await store.load()
    assert state.pending_platform_fee == UINT128_MAX
    assert state.pending_platform_fee == 340282366920938463463374607431768211455


async def test_role_tristate(store):
    await store.set_role("juno1off", False)
    await store.set_role("juno1on", True)
    await store.commit()

    assert await store.get_role("juno1missing") is None
    assert await store.get_role("juno1off") is False
    assert await store.get_role("juno1on") is True
    assert await store.list_roles() == [("juno1off", False), ("juno1on", True)]


async def test_rollback_discards_staged_changes(store):
    await store.create(TreasuryState(owner="juno1owner"))
    await store.commit()

    await store.save(TreasuryState(owner="juno1thief", pending_platform_fee=42))
    await store.set_role("juno1bot", True)
    await store.rollback()

    state = await store.load()
    assert state.owner == "juno1owner"
    assert state.pending_platform_fee == 0
    assert await store.get_role("juno1bot") is None
