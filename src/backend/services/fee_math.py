"""
fee_math.py: Platform fee and swap amount kernels (deterministic, integer-only).

All amounts are Uint128 in the treasury's native unit. Every division
truncates; multiplication always happens before division so rounding only
ever happens once, at the end of each formula:

  net_after_gas   = juno_amount - gas_estimate
  platform_fee    = floor(platform_fee_bips * juno_amount / 10000)      (gross)
  minimum_output  = floor(net_after_gas * rate * (10000 - slippage) / 10000)
  spendable       = net_after_gas - platform_fee                        (> 0)
"""

from __future__ import annotations

from dataclasses import dataclass

from errors import InsufficientAmountToSwap
from services.guards import BPS_DENOM
from services.state import BuyOrder
from services.uint import checked_add, checked_mul, checked_sub, multiply_ratio


@dataclass(frozen=True)
class BuyQuote:
    net_amount_after_gas: int
    platform_fee: int
    pending_platform_fee: int
    minimum_output: int
    spendable_amount: int


def net_after_gas(juno_amount: int, gas_estimate: int) -> int:
    return checked_sub(juno_amount, gas_estimate)


def platform_fee(juno_amount: int, platform_fee_bips: int) -> int:
    """Fee on the gross input amount, before gas is deducted."""
    return multiply_ratio(platform_fee_bips, juno_amount, BPS_DENOM)


def minimum_output(net_amount: int, token_amount_per_native: int, slippage_bips: int) -> int:
    """Worst-case output the swap venue must honor.

    Non-increasing in ``slippage_bips``; ``slippage_bips`` must already be
    within [0, 10000].
    """
    expected = checked_mul(net_amount, token_amount_per_native)
    return multiply_ratio(expected, checked_sub(BPS_DENOM, slippage_bips), BPS_DENOM)


def spendable_amount(net_amount: int, fee: int) -> int:
    spendable = checked_sub(net_amount, fee, error=InsufficientAmountToSwap)
    if spendable == 0:
        raise InsufficientAmountToSwap(
            f"Nothing left to swap: net {net_amount} minus fee {fee}"
        )
    return spendable


def quote_buy(order: BuyOrder, pending_platform_fee: int) -> BuyQuote:
    """Compute every amount of one buy, in order, against the current fee ledger.

    Pure: returns the would-be pending fee without touching any state. The
    caller applies it only if the whole call succeeds.
    """
    net = net_after_gas(order.juno_amount, order.gas_estimate)
    fee = platform_fee(order.juno_amount, order.platform_fee_bips)
    pending = checked_add(pending_platform_fee, fee)
    floor_out = minimum_output(net, order.token_amount_per_native, order.slippage_bips)
    spendable = spendable_amount(net, fee)
    return BuyQuote(
        net_amount_after_gas=net,
        platform_fee=fee,
        pending_platform_fee=pending,
        minimum_output=floor_out,
        spendable_amount=spendable,
    )
