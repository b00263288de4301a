"""TreasuryX @observe decorator: per-operation instrumentation.

Usage::

    import treasuryx

    @treasuryx.observe("buy_token")
    async def buy_token(...):
        ...

The decorator:
- Creates a MetricsCollector per invocation (propagated via contextvars)
- Captures wall-clock elapsed time
- Classifies the outcome: OK, REJECTED (an exception carrying a ``code``
  attribute, i.e. a domain guard failure) or ERROR (anything else)
- Emits one structured log line on completion or exception, then re-raises
"""
from __future__ import annotations

import functools
import inspect
import os
import uuid
from typing import Any, Callable, Optional

from treasuryx.metrics import (
    MetricsCollector,
    _current_metrics,
    set_current_collector,
)


def observe(operation: str, *, treasury: Optional[str] = None) -> Callable:
    """Wrap a gateway operation with TreasuryX observability.

    Args:
        operation: Operation name used in all emitted metrics.
        treasury: Override the ``TREASURY_NAME`` env var for this operation.

    Returns:
        Decorator applicable to async coroutines and regular functions.
    """

    def decorator(fn: Callable) -> Callable:
        if inspect.iscoroutinefunction(fn):
            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                collector = _make_collector(operation, treasury)
                token = set_current_collector(collector)
                try:
                    result = await fn(*args, **kwargs)
                    collector.set_outcome("OK")
                    return result
                except Exception as exc:
                    _record_failure(collector, exc)
                    raise
                finally:
                    collector.emit()
                    _current_metrics.reset(token)

            return async_wrapper
        else:
            @functools.wraps(fn)
            def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
                collector = _make_collector(operation, treasury)
                token = set_current_collector(collector)
                try:
                    result = fn(*args, **kwargs)
                    collector.set_outcome("OK")
                    return result
                except Exception as exc:
                    _record_failure(collector, exc)
                    raise
                finally:
                    collector.emit()
                    _current_metrics.reset(token)

            return sync_wrapper

    return decorator


def _make_collector(operation: str, override_name: Optional[str]) -> MetricsCollector:
    name = override_name or os.environ.get("TREASURY_NAME", "treasury")
    return MetricsCollector(
        treasury=name,
        operation=operation,
        call_id=str(uuid.uuid4()),
    )


def _record_failure(collector: MetricsCollector, exc: Exception) -> None:
    code = getattr(exc, "code", None)
    if isinstance(code, str):
        collector.set_outcome("REJECTED", code)
    else:
        collector.set_outcome("ERROR", type(exc).__name__)
