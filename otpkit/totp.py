"""
totp.py — time-based one-time passwords (RFC 6238).

TOTP is HOTP with counter = floor(unix_time / period). The division is done
on exact fractions so a float timestamp sitting on a boundary never lands in
the previous period.
"""

import hmac
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime
from fractions import Fraction
from numbers import Real
from typing import Optional, Union

from . import base32
from .algorithms import HashAlgorithm
from .exceptions import InvalidParameter
from .hotp import DEFAULT_ALGORITHM, DEFAULT_DIGITS, HOTP

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = 30  # seconds

Timestamp = Union[int, float, Fraction, datetime]


def check_period(period) -> Union[int, float, Fraction]:
    if isinstance(period, bool) or not isinstance(period, Real):
        raise InvalidParameter("period must be a number of seconds, got %r" % (period,), field="period")
    if not math.isfinite(period) or period <= 0:
        raise InvalidParameter("period must be positive and finite, got %r" % (period,), field="period")
    return period


def to_seconds(at: Timestamp) -> Fraction:
    """Exact unix seconds for a timestamp or datetime (naive means local time)."""
    if isinstance(at, datetime):
        return Fraction(at.timestamp())
    if isinstance(at, bool) or not isinstance(at, Real) or not math.isfinite(at):
        raise InvalidParameter("timestamp must be a finite number or datetime, got %r" % (at,), field="timestamp")
    return Fraction(at)


@dataclass(frozen=True)
class TOTP:
    """
    Handler for time-based OTP counters.

    :param hotp: the HOTP generator codes are delegated to
    :param period: seconds each code stays valid, fractions allowed
    """

    hotp: HOTP
    period: Union[int, float, Fraction] = DEFAULT_PERIOD

    def __post_init__(self) -> None:
        if not isinstance(self.hotp, HOTP):
            raise InvalidParameter("hotp must be an HOTP generator", field="hotp")
        object.__setattr__(self, "period", check_period(self.period))

    @classmethod
    def from_key(
        cls,
        key: bytes,
        period: Union[int, float] = DEFAULT_PERIOD,
        digits: int = DEFAULT_DIGITS,
        algorithm: Union[HashAlgorithm, str] = DEFAULT_ALGORITHM,
    ) -> "TOTP":
        return cls(HOTP(key, digits, algorithm), period)

    @classmethod
    def from_base32(
        cls,
        secret_b32: str,
        period: Union[int, float] = DEFAULT_PERIOD,
        digits: int = DEFAULT_DIGITS,
        algorithm: Union[HashAlgorithm, str] = DEFAULT_ALGORITHM,
        casefold: bool = False,
    ) -> "TOTP":
        return cls(HOTP(base32.decode(secret_b32, casefold=casefold), digits, algorithm), period)

    @property
    def digits(self) -> int:
        return self.hotp.digits

    @property
    def algorithm(self) -> HashAlgorithm:
        return self.hotp.algorithm

    @property
    def key(self) -> bytes:
        return self.hotp.key

    def counter_at(self, at: Timestamp) -> int:
        """floor(at / period); negative times have no counter."""
        seconds = to_seconds(at)
        if seconds < 0:
            raise InvalidParameter("timestamp must not be before the unix epoch", field="timestamp")
        return math.floor(seconds / Fraction(self.period))

    def code(self, at: Optional[Timestamp] = None) -> str:
        """
        Generate the code valid at ``at`` (defaults to now).

        Example (RFC 6238, SHA1, 8 digits): code(59) -> "94287082"
        """
        if at is None:
            at = time.time()
        counter = self.counter_at(at)
        logger.debug("TOTP at=%s period=%s counter=%d", float(to_seconds(at)), self.period, counter)
        return self.hotp.code(counter)

    def now(self) -> str:
        return self.code()

    def time_remaining(self, at: Optional[Timestamp] = None) -> float:
        """Seconds left before the code valid at ``at`` rolls over."""
        if at is None:
            at = time.time()
        boundary = (self.counter_at(at) + 1) * Fraction(self.period)
        return float(boundary - to_seconds(at))

    def verify(self, otp: str, at: Optional[Timestamp] = None, window: int = 1) -> bool:
        """
        Check ``otp`` against the codes of counters c - window .. c + window.

        :param window: accepted clock skew in periods on either side
        """
        if window < 0:
            raise InvalidParameter("window must not be negative", field="window")
        if at is None:
            at = time.time()
        counter = self.counter_at(at)
        candidate = str(otp).encode("utf-8")
        for offset in range(-window, window + 1):
            test_counter = counter + offset
            if test_counter < 0:
                continue
            if hmac.compare_digest(self.hotp.code(test_counter).encode("utf-8"), candidate):
                return True
        return False
