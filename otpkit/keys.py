"""Random shared secrets."""

import os

from . import base32
from .exceptions import InvalidParameter

SECRET_BYTES = 20  # 160-bit secret, RFC 4226 recommendation


def generate_secret(num_bytes: int = SECRET_BYTES) -> str:
    """
    Generate a random secret from os.urandom (CSPRNG), Base32 encoded.

    Padding is kept so the text always round-trips through base32.decode().
    """
    if num_bytes < 16:
        raise InvalidParameter("Secrets should be at least 128 bits", field="num_bytes")
    return base32.encode(os.urandom(num_bytes))
