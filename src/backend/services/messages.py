"""
messages.py: Outbound messages and the engine Response.

The engine only *requests* these; their delivery and execution belong to the
transport (services/outbox.py) and to the receiving chain modules. Amounts are
rendered as decimal strings on the wire.

Wire shapes:
  NativeTransfer  -> {"bank": {"send": {"to_address", "amount": [coin]}}}
  SwapInstruction -> {"wasm": {"execute": {"contract_addr", "msg":
                        {"swap_and_send_to": {...}}, "funds": [coin]}}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


def _coin(denom: str, amount: int) -> dict[str, str]:
    return {"denom": denom, "amount": str(amount)}


@dataclass(frozen=True)
class NativeTransfer:
    to_address: str
    denom: str
    amount: int

    kind = "native_transfer"

    def to_wire(self) -> dict[str, Any]:
        return {
            "bank": {
                "send": {
                    "to_address": self.to_address,
                    "amount": [_coin(self.denom, self.amount)],
                }
            }
        }


@dataclass(frozen=True)
class SwapInstruction:
    pool_address: str
    input_denom: str
    input_amount: int
    minimum_output: int
    recipient: str

    kind = "swap"

    def to_wire(self) -> dict[str, Any]:
        return {
            "wasm": {
                "execute": {
                    "contract_addr": self.pool_address,
                    "msg": {
                        "swap_and_send_to": {
                            # Native input is the pool's first token.
                            "input_token": "Token1",
                            "input_amount": str(self.input_amount),
                            "recipient": self.recipient,
                            "min_token": str(self.minimum_output),
                        }
                    },
                    "funds": [_coin(self.input_denom, self.input_amount)],
                }
            }
        }


OutboundMessage = Union[NativeTransfer, SwapInstruction]


@dataclass
class Response:
    """Result of one successful operation: messages to emit plus attributes."""

    messages: list[OutboundMessage] = field(default_factory=list)
    attributes: list[tuple[str, str]] = field(default_factory=list)

    def add_message(self, message: OutboundMessage) -> "Response":
        self.messages.append(message)
        return self

    def add_attribute(self, key: str, value: Any) -> "Response":
        self.attributes.append((key, str(value)))
        return self

    def attribute(self, key: str) -> str | None:
        for k, v in self.attributes:
            if k == key:
                return v
        return None

    def wire_messages(self) -> list[dict[str, Any]]:
        return [m.to_wire() for m in self.messages]
