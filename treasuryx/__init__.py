"""TreasuryX: operation metrics for the treasury gateway.

Every admin and swap operation the gateway performs can be wrapped with
``@treasuryx.observe`` to get one structured METRICS log line per call:
caller, outcome, guard error code, fee taken, amount forwarded and the
minimum output enforced on the swap venue.

Quick start::

    import treasuryx

    @treasuryx.observe("withdraw_fee")
    async def withdraw_fee(...):
        collector = treasuryx.get_current_collector()
        collector.set_withdrawal(amount)
        ...
"""

from treasuryx.decorators import observe
from treasuryx.metrics import (
    MetricsCollector,
    OperationMetrics,
    get_current_collector,
    set_current_collector,
)

__version__ = "1.0.0"
__all__ = [
    "observe",
    "OperationMetrics",
    "MetricsCollector",
    "get_current_collector",
    "set_current_collector",
]
