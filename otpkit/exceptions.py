"""
Exceptions raised by otpkit.

Everything derives from ValueError, like the rest of the toolkit: callers that
only care about "bad input" can keep catching ValueError.
"""

from typing import Optional


class OTPError(ValueError):
    """Base class for every error raised by otpkit."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidSecretEncoding(OTPError):
    """Base32 text with a bad symbol, a bad padding run or a bad length."""


class InvalidParameter(OTPError):
    """Digits, period, counter, timestamp or algorithm out of range."""


class InvalidConfiguration(OTPError):
    """A serialized generator record failed validation.

    ``field`` names the offending key of the record; the underlying error is
    kept as ``__cause__``.
    """
