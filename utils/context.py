"""
Per-batch state shared by the provider adapters and the reconciliation engine.

One BatchContext lives for one export run. It owns the sleep/clock used for
rate-limit backoff (injectable for tests), the advisory rate budgets, the
per-provider call counters and the lookup cache.
"""

import time
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .config import DEFAULT_RATE_LIMITS, get_rate_limits

logger = logging.getLogger('prime_to_simkl')

# Backoff used when a provider has no budget configured
FALLBACK_RETRY_DELAY = 5


@dataclass(frozen=True)
class RateBudget:
    """Advisory calls-per-window descriptor for one provider."""

    calls: int
    per_seconds: int

    @property
    def default_retry_delay(self) -> float:
        """Wait one full window when a 429 carries no Retry-After."""
        return float(self.per_seconds)


class BatchContext:
    """
    Explicit batch-scoped state, passed to adapters and the engine at construction.
    """

    def __init__(self, rate_budgets: Optional[Dict[str, RateBudget]] = None,
                 sleep: Optional[Callable[[float], None]] = None,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialize batch context.

        Args:
            rate_budgets: Provider key -> RateBudget (defaults applied for missing keys)
            sleep: Sleep function, time.sleep by default
            clock: Monotonic clock, time.monotonic by default
        """
        budgets = {key: RateBudget(**limit) for key, limit in DEFAULT_RATE_LIMITS.items()}
        budgets.update(rate_budgets or {})
        self.rate_budgets = budgets
        self.sleep = sleep or time.sleep
        self.clock = clock or time.monotonic
        self.started_at = self.clock()
        self.call_counts = Counter()
        self.rate_limit_waits = Counter()
        self.lookup_cache: Dict[tuple, object] = {}

    @classmethod
    def from_config(cls, config: Dict, sleep: Optional[Callable[[float], None]] = None,
                    clock: Optional[Callable[[], float]] = None) -> 'BatchContext':
        """Build a context with the rate budgets from a loaded config."""
        budgets = {key: RateBudget(**limit) for key, limit in get_rate_limits(config).items()}
        return cls(rate_budgets=budgets, sleep=sleep, clock=clock)

    def default_retry_delay(self, provider_key: str) -> float:
        budget = self.rate_budgets.get(provider_key)
        if budget is None:
            return float(FALLBACK_RETRY_DELAY)
        return budget.default_retry_delay

    def record_call(self, provider_key: str) -> None:
        self.call_counts[provider_key] += 1

    def backoff(self, provider_key: str, seconds: float) -> None:
        """Sleep after a rate-limit signal from a provider."""
        self.rate_limit_waits[provider_key] += 1
        logger.warning(f"{provider_key} rate limited, waiting {seconds:g}s")
        self.sleep(seconds)

    @property
    def elapsed(self) -> float:
        return self.clock() - self.started_at
