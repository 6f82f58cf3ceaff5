# ABOUTME: Ordered strategy chain used by every parser fallback cascade
# ABOUTME: Tries alternative extraction procedures in order and stops at the first non-empty result

import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from seinfeld_tonight.utils.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """A named, argument-free extraction procedure."""

    name: str
    run: Callable[[], list[T] | Awaitable[list[T]]]


@dataclass(frozen=True)
class ChainOutcome(Generic[T]):
    """Result of running a strategy chain."""

    records: list[T]
    strategy: str | None = None
    attempted: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.records


class StrategyChain(Generic[T]):
    """Run strategies in order, short-circuiting on the first one that yields records.

    Strategies may be plain or async callables. A strategy that yields nothing is the
    signal to move on; exceptions are not swallowed here, strategies that can fail
    recoverably must catch their own errors.
    """

    def __init__(self, name: str, strategies: Sequence[Strategy[T]]):
        self.name = name
        self.strategies = list(strategies)

    def run_sync(self) -> ChainOutcome[T]:
        attempted: list[str] = []
        for strategy in self.strategies:
            attempted.append(strategy.name)
            records = strategy.run()
            if inspect.isawaitable(records):
                raise TypeError(f"Strategy '{strategy.name}' is async; use StrategyChain.run()")
            if records:
                return self._success(strategy.name, list(records), attempted)
            logger.debug("Strategy produced no records", chain=self.name, strategy=strategy.name)
        return ChainOutcome(records=[], strategy=None, attempted=attempted)

    async def run(self) -> ChainOutcome[T]:
        attempted: list[str] = []
        for strategy in self.strategies:
            attempted.append(strategy.name)
            records = strategy.run()
            if inspect.isawaitable(records):
                records = await records
            if records:
                return self._success(strategy.name, list(records), attempted)
            logger.debug("Strategy produced no records", chain=self.name, strategy=strategy.name)
        return ChainOutcome(records=[], strategy=None, attempted=attempted)

    def _success(self, name: str, records: list[T], attempted: list[str]) -> ChainOutcome[T]:
        if len(attempted) > 1:
            logger.info("Fallback strategy succeeded", chain=self.name, strategy=name, records=len(records))
        return ChainOutcome(records=records, strategy=name, attempted=attempted)
