"""Hash functions an OTP generator can compute its HMAC with."""

import hashlib
import hmac
from enum import Enum
from typing import Union

from .exceptions import InvalidParameter


class HashAlgorithm(str, Enum):
    """
    Closed set of HMAC hash functions.

    The value is the name used in serialized records and otpauth URIs.
    """

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"
    MD5 = "MD5"

    def hmac_digest(self, key: bytes, message: bytes) -> bytes:
        """HMAC(key, message) using this hash function."""
        return hmac.new(key, message, _HASHES[self]).digest()

    @property
    def digest_size(self) -> int:
        return _HASHES[self]().digest_size

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: Union["HashAlgorithm", str]) -> "HashAlgorithm":
        """
        Accept a member or a name such as "SHA1", "sha256" or "SHA-512".

        Raises:
            InvalidParameter: unknown algorithm name
        """
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            key = name.strip().upper().replace("-", "").replace("_", "")
            if key in cls.__members__:
                return cls[key]
        raise InvalidParameter(
            "Invalid value for algorithm %r, must be one of %s" % (name, ", ".join(cls.__members__)),
            field="algorithm",
        )


_HASHES = {
    HashAlgorithm.SHA1: hashlib.sha1,
    HashAlgorithm.SHA256: hashlib.sha256,
    HashAlgorithm.SHA384: hashlib.sha384,
    HashAlgorithm.SHA512: hashlib.sha512,
    HashAlgorithm.MD5: hashlib.md5,
}

_DESCRIPTIONS = {
    HashAlgorithm.SHA1: "SHA-1",
    HashAlgorithm.SHA256: "SHA-256",
    HashAlgorithm.SHA384: "SHA-384",
    HashAlgorithm.SHA512: "SHA-512",
    HashAlgorithm.MD5: "MD5",
}
