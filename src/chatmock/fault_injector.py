# src/chatmock/fault_injector.py
"""Fault injection decisions for the rand_* routes.

The FaultInjector decides per request whether to delay, fail, or pass
through, depending on the route's FaultMode. It only decides; the server
applies the decision (sleeping or answering 500) before the request body
is decoded.

Combined mode nests the failure roll inside its own roll, so with the
default 50/50 settings the net outcome is 25% failure, 37.5% delay then
success, and 37.5% plain success.
"""

import random as random_module
from dataclasses import dataclass
from enum import Enum

from chatmock.config import FaultConfig


class FaultMode(Enum):
    """Fault behavior attached to a route."""

    NONE = "none"
    SLEEP = "rand_sleep"
    FAIL = "rand_fail"
    ALL = "rand_all"


@dataclass(frozen=True, slots=True)
class FaultDecision:
    """Result of a fault injection decision.

    Attributes:
        fail: Answer with an injected 500 instead of delegating
        delay_ms: Sleep this long before delegating (never set together with fail)
    """

    fail: bool = False
    delay_ms: int = 0

    @classmethod
    def pass_through(cls) -> "FaultDecision":
        """Create a decision that delegates unmodified."""
        return cls()

    @classmethod
    def failure(cls) -> "FaultDecision":
        """Create a decision for an injected failure."""
        return cls(fail=True)

    @classmethod
    def delay(cls, delay_ms: int) -> "FaultDecision":
        """Create a decision that sleeps before delegating."""
        return cls(delay_ms=delay_ms)

    @property
    def delay_sec(self) -> float:
        """Delay in seconds (suitable for asyncio.sleep())."""
        return self.delay_ms / 1000.0


class FaultInjector:
    """Decides per-request delay and failure for a FaultMode.

    Stateless apart from the random source. Decisions for different
    requests are independent.

    Usage:
        injector = FaultInjector(FaultConfig(), rng=random.Random(42))
        decision = injector.decide(FaultMode.ALL)
        if decision.fail:
            ...
    """

    def __init__(
        self,
        config: FaultConfig,
        *,
        rng: random_module.Random | None = None,
    ) -> None:
        """Initialize the fault injector.

        Args:
            config: Fault injection configuration
            rng: Random instance for testing (default: creates new Random instance).
                 Inject a scripted random.Random() for exact decision sequences.
        """
        self._config = config
        self._rng = rng if rng is not None else random_module.Random()

    @property
    def config(self) -> FaultConfig:
        return self._config

    def _should_trigger(self, percentage: float) -> bool:
        """Determine if a fault should trigger based on percentage (0-100)."""
        if percentage <= 0:
            return False
        return self._rng.random() * 100 < percentage

    def _pick_delay_ms(self) -> int:
        """Pick a delay uniformly from [0, max_delay_ms) whole milliseconds."""
        if self._config.max_delay_ms <= 0:
            return 0
        return self._rng.randrange(self._config.max_delay_ms)

    def _decide_failure(self) -> FaultDecision:
        if self._should_trigger(self._config.failure_pct):
            return FaultDecision.failure()
        return FaultDecision.pass_through()

    def decide(self, mode: FaultMode) -> FaultDecision:
        """Decide what fault (if any) to inject for one request.

        Args:
            mode: Fault behavior of the route that received the request

        Returns:
            FaultDecision for the server to apply
        """
        if mode is FaultMode.NONE:
            return FaultDecision.pass_through()
        if mode is FaultMode.SLEEP:
            return FaultDecision.delay(self._pick_delay_ms())
        if mode is FaultMode.FAIL:
            return self._decide_failure()

        # FaultMode.ALL: failure path (with its own roll) or delay path
        if self._should_trigger(self._config.combined_failure_pct):
            return self._decide_failure()
        return FaultDecision.delay(self._pick_delay_ms())
