"""
scheduler.py — live streams of TOTP codes, one per period boundary.

    scheduler = PeriodicCodeScheduler()
    async with scheduler.subscribe(totp) as codes:
        async for code in codes:
            ...

Every wait targets an absolute boundary, (c + 1) * period on the wall
clock, recomputed from the clock on each iteration. Jitter in one period
therefore never carries over into the next. A subscription stops when
cancel() is called, when it is closed, or when the consuming task is
cancelled; a pending wait is woken up at once.
"""

import asyncio
import logging
import math
import time
from fractions import Fraction
from typing import Callable, Generic, List, Optional, Sequence, TypeVar, Union

from .exceptions import InvalidParameter
from .totp import TOTP, check_period

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


class CodeSubscription(Generic[T]):
    """
    Async iterator over the codes of one subscription.

    The first value is produced for the subscription instant, the following
    ones at each boundary of ``period``. ``produce(instant)`` computes the
    value for an exact unix time.
    """

    def __init__(self, produce: Callable[[Fraction], T], period, clock: Clock, name: str = "codes"):
        self._produce = produce
        self._period = Fraction(period)
        self._clock = clock
        self._name = name
        self._cancelled = asyncio.Event()
        self._last: Optional[int] = None  # counter of the last emitted boundary
        self._started = False
        self._finished = False

    @property
    def period(self) -> Fraction:
        return self._period

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop the stream; a pending wait returns immediately."""
        if not self._cancelled.is_set():
            logger.info("Cancelling %s subscription", self._name)
        self._cancelled.set()

    async def aclose(self) -> None:
        self.cancel()

    def __aiter__(self) -> "CodeSubscription[T]":
        return self

    async def __aenter__(self) -> "CodeSubscription[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.cancel()

    def next_boundary(self, now: float) -> Fraction:
        """Absolute time of the first boundary after ``now`` not yet emitted."""
        counter = math.floor(Fraction(now) / self._period)
        if self._last is not None:
            counter = max(counter, self._last)
        return (counter + 1) * self._period

    async def _wait_until(self, boundary: Fraction) -> bool:
        """Sleep until the clock reaches ``boundary``; False if cancelled first."""
        while not self._cancelled.is_set():
            delay = float(boundary - Fraction(self._clock()))
            if delay <= 0:
                return True
            try:
                await asyncio.wait_for(self._cancelled.wait(), timeout=delay)
            except asyncio.TimeoutError:
                # woken by the timer; loop to make sure we are not early
                continue
        return False

    async def __anext__(self) -> T:
        if self._finished or self._cancelled.is_set():
            self._finished = True
            raise StopAsyncIteration

        if not self._started:
            self._started = True
            now = self._clock()
            logger.info("Started %s subscription, period=%ss", self._name, float(self._period))
            self._last = math.floor(Fraction(now) / self._period)
            return self._produce(Fraction(now))

        boundary = self.next_boundary(self._clock())
        logger.debug("%s: waiting for boundary %.3f", self._name, float(boundary))
        if not await self._wait_until(boundary):
            self._finished = True
            logger.info("Stopped %s subscription", self._name)
            raise StopAsyncIteration
        self._last = int(boundary / self._period)
        return self._produce(boundary)


class PeriodicCodeScheduler:
    """
    Hands out independent code streams for TOTP generators.

    :param clock: source of unix time, time.time unless a test swaps it
    """

    def __init__(self, clock: Clock = time.time):
        self.clock = clock

    def subscribe(self, totp: TOTP) -> CodeSubscription[str]:
        """Stream of codes for one generator, one per period boundary."""
        if not isinstance(totp, TOTP):
            raise InvalidParameter("subscribe() needs a TOTP generator", field="totp")
        return CodeSubscription(totp.code, totp.period, self.clock, name="TOTP")

    def subscribe_many(
        self,
        totps: Sequence[TOTP],
        period: Optional[Union[int, float, Fraction]] = None,
    ) -> CodeSubscription[List[str]]:
        """
        One stream for several generators polled at a shared cadence.

        The cadence is ``period`` or the smallest period among ``totps``.
        Each emission lists every generator's code for the same instant,
        computed with that generator's own period.
        """
        totps = list(totps)
        for totp in totps:
            if not isinstance(totp, TOTP):
                raise InvalidParameter("subscribe_many() needs TOTP generators", field="totps")
        if period is None:
            period = min((totp.period for totp in totps), default=1)
        period = check_period(period)

        def produce(instant: Fraction) -> List[str]:
            return [totp.code(instant) for totp in totps]

        subscription = CodeSubscription(produce, period, self.clock, name="%d-TOTP" % len(totps))
        if not totps:
            subscription.cancel()
        return subscription
