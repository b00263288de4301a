"""Tests for the authorization predicates and the buy-order guards."""

import pytest

from conftest import NOW, make_order
from errors import (
    Expired,
    InsufficientInputForGas,
    SlippageOutOfRange,
    Unauthorized,
    UnauthorizedRole,
)
from services.auth import is_active_bot, is_owner, require_active_bot, require_owner
from services.guards import check_buy_order, check_deadline, check_gas_budget, check_slippage
from services.state import BlockEnv, TreasuryState


class TestAuthorization:
    def test_is_owner(self):
        state = TreasuryState(owner="alice")
        assert is_owner(state, "alice")
        assert not is_owner(state, "mallory")
        require_owner(state, "alice")
        with pytest.raises(Unauthorized):
            require_owner(state, "mallory")

    def test_is_active_bot_only_for_enabled_entry(self):
        assert is_active_bot(True)
        assert not is_active_bot(False)
        assert not is_active_bot(None)

    def test_missing_entry_and_disabled_entry_are_distinct(self):
        with pytest.raises(Unauthorized) as missing:
            require_active_bot(None, "juno1stranger")
        with pytest.raises(UnauthorizedRole) as disabled:
            require_active_bot(False, "juno1retired")
        assert missing.value.code != disabled.value.code
        require_active_bot(True, "juno1bot")


class TestGuards:
    def test_deadline_is_inclusive(self):
        check_deadline(BlockEnv(time=NOW), NOW)
        with pytest.raises(Expired):
            check_deadline(BlockEnv(time=NOW + 1), NOW)

    def test_slippage_bound(self):
        check_slippage(0)
        check_slippage(10_000)
        with pytest.raises(SlippageOutOfRange):
            check_slippage(10_001)

    def test_gas_budget(self):
        check_gas_budget(100, 100)
        with pytest.raises(InsufficientInputForGas):
            check_gas_budget(101, 100)

    def test_first_violated_guard_wins(self):
        bad_everything = make_order(deadline=NOW - 1, slippage_bips=10_001, gas_estimate=2_000_000)
        with pytest.raises(Expired):
            check_buy_order(BlockEnv(time=NOW), bad_everything)

        bad_slippage_and_gas = make_order(slippage_bips=10_001, gas_estimate=2_000_000)
        with pytest.raises(SlippageOutOfRange):
            check_buy_order(BlockEnv(time=NOW), bad_slippage_and_gas)

    def test_slippage_out_of_range_regardless_of_other_params(self):
        for order in (
            make_order(slippage_bips=10_001),
            make_order(slippage_bips=10_001, juno_amount=1, gas_estimate=0, platform_fee_bips=0),
            make_order(slippage_bips=10_001, token_amount_per_native=0),
        ):
            with pytest.raises(SlippageOutOfRange):
                check_buy_order(BlockEnv(time=NOW), order)
