"""
base32.py — RFC 4648 Base32 codec used to exchange OTP secrets.

- encode(): bytes -> "A-Z2-7" text, '=' padded to a multiple of 8 symbols
- decode(): text -> bytes, strict: bad symbols, a misplaced or oversized
  padding run and impossible lengths raise InvalidSecretEncoding. The
  padding run is not matched against the final group: "MY=" decodes to b"f".

Bit layout of one group (5 bytes <-> 8 symbols, MSB first):

    bytes:   |76543210|76543210|76543210|76543210|76543210|
    symbols: |43210|43210|43210|43210|43210|43210|43210|43210|

A final group of r bytes produces ceil(8r/5) symbols followed by padding:
r=1 -> 2 symbols + 6 '=', r=2 -> 4 + 4, r=3 -> 5 + 3, r=4 -> 7 + 1.
"""

from typing import Dict

from .exceptions import InvalidSecretEncoding

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
PAD = "="

_DECODE_TABLE: Dict[str, int] = {symbol: value for value, symbol in enumerate(ALPHABET)}
# ASCII a-z only; str.upper() would map "\u017f" to "S" and "\u0131" to "I"
_CASEFOLD_TABLE: Dict[str, int] = dict(_DECODE_TABLE)
_CASEFOLD_TABLE.update((symbol.lower(), value) for symbol, value in _DECODE_TABLE.items())

# symbols in the final group -> decoded bytes
_TAIL_BYTES = {0: 0, 2: 1, 4: 2, 5: 3, 7: 4}
_PADDING_LENGTHS = (6, 4, 3, 1)


def encode(data: bytes) -> str:
    """
    Encode bytes as padded Base32 text.

    Example: encode(b"foobar") -> "MZXW6YTBOI======"
    """
    data = bytes(data)
    out = []
    for start in range(0, len(data), 5):
        chunk = data[start:start + 5]
        # right-fill the partial group with zero bits
        group = int.from_bytes(chunk.ljust(5, b"\0"), "big")
        symbols = [ALPHABET[(group >> shift) & 0x1F] for shift in range(35, -5, -5)]
        used = (len(chunk) * 8 + 4) // 5
        out.append("".join(symbols[:used]) + PAD * (8 - used))
    return "".join(out)


def _padding_length(text: str) -> int:
    # longest legal run first: "======" must not be read as "=" + garbage
    for length in _PADDING_LENGTHS:
        if text.endswith(PAD * length):
            return length
    return 0


def decode(text: str, casefold: bool = False) -> bytes:
    """
    Decode Base32 text back to bytes.

    Arguments:
        text: Base32 symbols, optionally followed by a legal '=' run.
            Unpadded text is accepted (otpauth secrets omit padding).
        casefold: accept lowercase ASCII symbols too.

    Raises:
        InvalidSecretEncoding: unknown symbol, '=' anywhere but a legal
            trailing run (1, 3, 4 or 6 long), or a symbol count whose
            remainder mod 8 is not 0, 2, 4, 5 or 7.
    """
    if not isinstance(text, str):
        raise InvalidSecretEncoding("Base32 input must be text, got %s" % type(text).__name__)
    if not text:
        return b""
    padding = _padding_length(text)
    table = _CASEFOLD_TABLE if casefold else _DECODE_TABLE
    body = text[:len(text) - padding]
    for position, symbol in enumerate(body):
        if symbol not in table:
            raise InvalidSecretEncoding(
                "Invalid Base32 character %r at position %d" % (symbol, position)
            )

    tail = len(body) % 8
    if tail not in _TAIL_BYTES:
        raise InvalidSecretEncoding(
            "Invalid Base32 length: %d symbols leave a remainder of %d" % (len(body), tail)
        )

    out = bytearray()
    for start in range(0, len(body), 8):
        chunk = body[start:start + 8]
        group = 0
        for symbol in chunk.ljust(8, "A"):
            group = (group << 5) | table[symbol]
        size = 5 if len(chunk) == 8 else _TAIL_BYTES[len(chunk)]
        # leftover low bits of a partial group are dropped
        out += group.to_bytes(5, "big")[:size]
    return bytes(out)


def is_valid(text: str, casefold: bool = False) -> bool:
    """True when decode() would accept ``text``."""
    try:
        decode(text, casefold=casefold)
    except InvalidSecretEncoding:
        return False
    return True
