"""
guards.py: Buy-order guardrails.

Each guard is a pure function of the order (and chain time) that raises on the
first violation. check_buy_order runs them in the fixed order the caller is
expected to observe: deadline, slippage bound, gas budget.
"""

from errors import Expired, InsufficientInputForGas, SlippageOutOfRange
from services.state import BlockEnv, BuyOrder

BPS_DENOM = 10_000


def check_deadline(env: BlockEnv, deadline: int) -> None:
    # Inclusive: a call landing exactly at the deadline still executes.
    if env.time > deadline:
        raise Expired(f"Order expired at {deadline}, chain time is {env.time}")


def check_slippage(slippage_bips: int) -> None:
    if slippage_bips > BPS_DENOM:
        raise SlippageOutOfRange(
            f"slippage_bips must be <= {BPS_DENOM}, got {slippage_bips}"
        )


def check_gas_budget(gas_estimate: int, juno_amount: int) -> None:
    if gas_estimate > juno_amount:
        raise InsufficientInputForGas(
            f"gas_estimate {gas_estimate} exceeds input amount {juno_amount}"
        )


def check_buy_order(env: BlockEnv, order: BuyOrder) -> None:
    check_deadline(env, order.deadline)
    check_slippage(order.slippage_bips)
    check_gas_budget(order.gas_estimate, order.juno_amount)
