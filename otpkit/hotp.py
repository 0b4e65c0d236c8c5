"""
hotp.py — HMAC-based one-time passwords (RFC 4226).

Steps for one code:
1. Message = 8-byte counter (big-endian)
2. HS = HMAC-<algorithm>(key, message)
3. Dynamic truncation: offset = HS[-1] & 0x0F, take HS[offset:offset+4]
   as a big-endian integer and clear its top bit (31-bit value)
4. code = value mod 10^digits, zero-padded to ``digits`` characters
"""

import hmac
import logging
import struct
from dataclasses import dataclass, field
from typing import Tuple, Union

from . import base32
from .algorithms import HashAlgorithm
from .exceptions import InvalidParameter

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6
MIN_DIGITS = 1
MAX_DIGITS = 10             # RFC 4226: a 31-bit value holds at most 10 digits
DEFAULT_ALGORITHM = HashAlgorithm.SHA1
MAX_COUNTER = 2 ** 64 - 1
# offset <= 15 plus a 4-byte window
MIN_DIGEST_SIZE = 0x0F + 4


def int_to_bytes(i: int) -> bytes:
    """
    Encode a counter as the 8-byte big-endian message RFC 4226 asks for.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 dynamic truncation.

    - offset = last byte & 0x0F
    - 4 bytes from offset, read big-endian, top bit cleared

    Returns:
        int: 31-bit unsigned value
    """
    offset = hmac_digest[-1] & 0x0F
    return int.from_bytes(hmac_digest[offset:offset + 4], "big") & 0x7FFFFFFF


def _check_digits(digits) -> int:
    if isinstance(digits, bool) or not isinstance(digits, int):
        raise InvalidParameter("digits must be an integer, got %r" % (digits,), field="digits")
    if not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise InvalidParameter(
            "digits must be between %d and %d, got %d" % (MIN_DIGITS, MAX_DIGITS, digits),
            field="digits",
        )
    return digits


def _check_key(key) -> bytes:
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise InvalidParameter("key must be bytes, got %s" % type(key).__name__, field="key")
    key = bytes(key)
    if not key:
        raise InvalidParameter("key must not be empty", field="key")
    return key


def _check_algorithm(algorithm) -> HashAlgorithm:
    algorithm = HashAlgorithm.parse(algorithm)
    if algorithm.digest_size < MIN_DIGEST_SIZE:
        raise InvalidParameter(
            "%s digest is %d bytes, dynamic truncation needs at least %d"
            % (algorithm.description, algorithm.digest_size, MIN_DIGEST_SIZE),
            field="algorithm",
        )
    return algorithm


@dataclass(frozen=True)
class HOTP:
    """
    Handler for HMAC-based OTP counters.

    :param key: raw shared secret
    :param digits: length of the code, 1 to 10 (6 is what most apps expect)
    :param algorithm: hash function for the HMAC, SHA1 unless told otherwise
    """

    key: bytes = field(repr=False)
    digits: int = DEFAULT_DIGITS
    algorithm: HashAlgorithm = DEFAULT_ALGORITHM

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "key", _check_key(self.key))
        object.__setattr__(self, "digits", _check_digits(self.digits))
        object.__setattr__(self, "algorithm", _check_algorithm(self.algorithm))

    @classmethod
    def from_base32(
        cls,
        secret_b32: str,
        digits: int = DEFAULT_DIGITS,
        algorithm: Union[HashAlgorithm, str] = DEFAULT_ALGORITHM,
        casefold: bool = False,
    ) -> "HOTP":
        """
        Build a generator from a Base32 secret.

        Raises:
            InvalidSecretEncoding: secret is not valid Base32
            InvalidParameter: digits / algorithm rejected
        """
        return cls(base32.decode(secret_b32, casefold=casefold), digits, algorithm)

    @property
    def secret(self) -> str:
        """The key as padded Base32 text."""
        return base32.encode(self.key)

    def code(self, counter: int) -> str:
        """
        Generate the code for ``counter``.

        :param counter: unsigned 64-bit HMAC counter
        :returns: zero-padded decimal string of ``digits`` characters
        """
        if isinstance(counter, bool) or not isinstance(counter, int):
            raise InvalidParameter("counter must be an integer, got %r" % (counter,), field="counter")
        if not 0 <= counter <= MAX_COUNTER:
            raise InvalidParameter("counter must fit in 64 unsigned bits, got %d" % counter, field="counter")

        digest = self.algorithm.hmac_digest(self.key, int_to_bytes(counter))
        dbc = dynamic_truncate(digest)
        code = str(dbc % 10 ** self.digits).zfill(self.digits)
        logger.debug("HOTP %s counter=%d digits=%d", self.algorithm.description, counter, self.digits)
        return code

    def verify(self, otp: str, counter: int, look_ahead: int = 0) -> Tuple[bool, int]:
        """
        Check ``otp`` against counters counter .. counter + look_ahead.

        Returns:
            (True, matched_counter + 1) on a match, else (False, counter)
        """
        if look_ahead < 0:
            raise InvalidParameter("look_ahead must not be negative", field="look_ahead")
        candidate = str(otp).encode("utf-8")
        for step in range(look_ahead + 1):
            if counter + step > MAX_COUNTER:
                break
            if hmac.compare_digest(self.code(counter + step).encode("utf-8"), candidate):
                return True, counter + step + 1
        return False, counter
