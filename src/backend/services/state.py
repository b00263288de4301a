"""
state.py: In-memory working types threaded through one engine call.

TreasuryState is the engine's exclusively-owned copy of the treasury_config
row. It is loaded at the start of a call, mutated in memory, and written back
by the store only when the operation succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from services.uint import checked_add, checked_sub, uint64, uint128
from errors import FeeUnderflow, InvalidAddress


def require_address(value: str, name: str = "address") -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidAddress(f"{name} must be a non-empty address")
    return value


@dataclass
class TreasuryState:
    owner: str
    pending_platform_fee: int = 0

    def __post_init__(self) -> None:
        require_address(self.owner, "owner")
        uint128(self.pending_platform_fee, name="pending_platform_fee")

    def transfer_ownership(self, new_owner: str) -> None:
        self.owner = require_address(new_owner, "new_owner")

    def accrue_fee(self, amount: int) -> None:
        self.pending_platform_fee = checked_add(self.pending_platform_fee, amount)

    def release_fee(self, amount: int) -> None:
        self.pending_platform_fee = checked_sub(
            self.pending_platform_fee, amount, error=FeeUnderflow
        )


@dataclass(frozen=True)
class BlockEnv:
    """Chain-observed context supplied by the caller per invocation.

    time is whole seconds since the Unix epoch, the same unit as
    BuyOrder.deadline.
    """
    time: int

    def __post_init__(self) -> None:
        uint64(self.time, name="time")


@dataclass(frozen=True)
class BuyOrder:
    juno_amount: int
    token_amount_per_native: int
    slippage_bips: int
    recipient: str
    pool_address: str
    platform_fee_bips: int
    gas_estimate: int
    deadline: int
    token: Optional[str] = None

    def __post_init__(self) -> None:
        for name in (
            "juno_amount",
            "token_amount_per_native",
            "slippage_bips",
            "platform_fee_bips",
            "gas_estimate",
        ):
            uint128(getattr(self, name), name=name)
        uint64(self.deadline, name="deadline")
