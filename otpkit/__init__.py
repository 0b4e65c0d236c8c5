"""
otpkit
======

One-time password generation and verification per RFC 4226 (HOTP) and
RFC 6238 (TOTP), with the RFC 4648 Base32 codec used to exchange secrets.

──────────────────────────────────────────────
Core algorithms
──────────────────────────────────────────────
- HOTP (HMAC-based One-Time Password):
  code = Truncate(HMAC-<alg>(key=secret, msg=counter)) mod 10^digits
  -> counter goes up by one per use (event-based tokens).

- TOTP (Time-based One-Time Password):
  HOTP with counter = floor(timestamp / period)
  -> period defaults to 30 seconds, RFC 6238 suggests 6 digits, SHA-1.

- Dynamic truncation:
  4 bytes taken from the HMAC at offset (last byte & 0x0F), top bit cleared.

──────────────────────────────────────────────
Quick start
──────────────────────────────────────────────
>>> from otpkit import HOTP, TOTP
>>> HOTP(b"12345678901234567890").code(0)
'755224'
>>> totp = TOTP.from_base32("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", digits=8)
>>> totp.code(59)
'94287082'

Live codes, one per period boundary:

    scheduler = PeriodicCodeScheduler()
    async with scheduler.subscribe(totp) as codes:
        async for code in codes:
            print(code)
"""

__version__ = "1.0.0"

from .algorithms import HashAlgorithm
from .config import from_dict, load_records, to_dict
from .exceptions import InvalidConfiguration, InvalidParameter, InvalidSecretEncoding, OTPError
from .hotp import DEFAULT_DIGITS, MAX_DIGITS, MIN_DIGITS, HOTP
from .keys import generate_secret
from .scheduler import CodeSubscription, PeriodicCodeScheduler
from .totp import DEFAULT_PERIOD, TOTP

__all__ = [
    "HashAlgorithm",
    "HOTP",
    "TOTP",
    "PeriodicCodeScheduler",
    "CodeSubscription",
    "OTPError",
    "InvalidSecretEncoding",
    "InvalidParameter",
    "InvalidConfiguration",
    "from_dict",
    "to_dict",
    "load_records",
    "generate_secret",
    "DEFAULT_DIGITS",
    "DEFAULT_PERIOD",
    "MIN_DIGITS",
    "MAX_DIGITS",
]
