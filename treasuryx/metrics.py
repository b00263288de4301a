"""TreasuryX metrics model and collection.

Captures one snapshot per gateway operation: who called, what was asked,
what it cost, and how it ended. Collection never changes the outcome of an
operation.

Uses ``contextvars`` so a single MetricsCollector propagates through nested
async calls without any thread-local risk.
"""
from __future__ import annotations

import contextvars
import json
import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger("treasuryx.metrics")

_current_metrics: contextvars.ContextVar[Optional["MetricsCollector"]] = (
    contextvars.ContextVar("_treasuryx_current_metrics", default=None)
)


@dataclass
class OperationMetrics:
    """Observability snapshot for one gateway operation."""

    treasury: str
    operation: str
    call_id: str
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    caller: str = ""

    # --- Outcome ---
    outcome: str = "PENDING"          # OK | REJECTED | ERROR
    error_code: str = ""              # TreasuryError.code, or exception class name

    # --- Economics (native units, as decimal strings) ---
    input_amount: str = "0"
    platform_fee: str = "0"
    spendable_amount: str = "0"
    minimum_output: str = "0"
    withdrawn: str = "0"
    pending_fee_after: str = ""

    messages_emitted: int = 0

    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class MetricsCollector:
    """Builds and emits an OperationMetrics snapshot for one call."""

    def __init__(self, treasury: str, operation: str, call_id: str) -> None:
        self._start = time.monotonic()
        self._m = OperationMetrics(
            treasury=treasury,
            operation=operation,
            call_id=call_id,
        )

    # --- Fluent builder API ---

    def set_caller(self, caller: str) -> "MetricsCollector":
        self._m.caller = caller
        return self

    def set_swap(
        self,
        input_amount: int,
        platform_fee: int,
        spendable_amount: int,
        minimum_output: int,
    ) -> "MetricsCollector":
        self._m.input_amount = str(input_amount)
        self._m.platform_fee = str(platform_fee)
        self._m.spendable_amount = str(spendable_amount)
        self._m.minimum_output = str(minimum_output)
        return self

    def set_withdrawal(self, amount: int) -> "MetricsCollector":
        self._m.withdrawn = str(amount)
        return self

    def set_pending_fee(self, amount: int) -> "MetricsCollector":
        self._m.pending_fee_after = str(amount)
        return self

    def set_messages(self, count: int) -> "MetricsCollector":
        self._m.messages_emitted = count
        return self

    def set_outcome(self, outcome: str, error_code: str = "") -> "MetricsCollector":
        self._m.outcome = outcome
        self._m.error_code = error_code
        return self

    def snapshot(self) -> OperationMetrics:
        return self._m

    def emit(self) -> OperationMetrics:
        """Finalise timing, log structured metrics, and return the snapshot."""
        elapsed = time.monotonic() - self._start
        self._m.extra["elapsed_s"] = round(elapsed, 3)
        logger.info(
            "METRICS treasury=%s op=%s call=%s caller=%s outcome=%s code=%s "
            "fee=%s spendable=%s min_out=%s msgs=%d elapsed_s=%.3f",
            self._m.treasury,
            self._m.operation,
            self._m.call_id[:8],
            self._m.caller,
            self._m.outcome,
            self._m.error_code or "-",
            self._m.platform_fee,
            self._m.spendable_amount,
            self._m.minimum_output,
            self._m.messages_emitted,
            elapsed,
        )
        return self._m


# --- Context propagation helpers ---

def get_current_collector() -> Optional[MetricsCollector]:
    """Return the MetricsCollector active in the current async context, or None."""
    return _current_metrics.get()


def set_current_collector(collector: MetricsCollector) -> contextvars.Token:
    """Activate a collector in the current async context. Returns reset token."""
    return _current_metrics.set(collector)
