"""
config.py — generator <-> plain record conversion.

Record layout (what JSON/YAML/TOML loaders hand us):

    {"key": "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", "digits": 6,
     "algorithm": "SHA1", "period": 30}

A record with "period" is a TOTP, without it an HOTP. from_dict() validates
every field itself, so a record that made it through some serializer is
never trusted as-is.
"""

from fractions import Fraction
from typing import Any, Dict, List, Mapping, Union

from . import base32
from .algorithms import HashAlgorithm
from .exceptions import InvalidConfiguration, OTPError
from .hotp import DEFAULT_ALGORITHM, DEFAULT_DIGITS, HOTP
from .totp import TOTP

Generator = Union[HOTP, TOTP]


def to_dict(generator: Generator) -> Dict[str, Any]:
    """
    Serialize an HOTP or TOTP generator into a record.

    A Fraction period is written as an int or float only when that is exact,
    otherwise InvalidConfiguration is raised.
    """
    if isinstance(generator, TOTP):
        record = to_dict(generator.hotp)
        record["period"] = _period_number(generator.period)
        return record
    if isinstance(generator, HOTP):
        return {
            "key": base32.encode(generator.key),
            "digits": generator.digits,
            "algorithm": generator.algorithm.value,
        }
    raise TypeError("expected HOTP or TOTP, got %s" % type(generator).__name__)


def _period_number(period):
    if not isinstance(period, Fraction):
        return period
    if period.denominator == 1:
        return int(period)
    if Fraction(float(period)) == period:
        return float(period)
    raise InvalidConfiguration("Period %s has no exact float form" % period, field="period")


def _field(record: Mapping[str, Any], name: str, default: Any = None) -> Any:
    value = record.get(name, default)
    if value is None:
        raise InvalidConfiguration("Missing required field %r" % name, field=name)
    return value


def from_dict(record: Mapping[str, Any]) -> Generator:
    """
    Rebuild a generator from a record.

    Raises:
        InvalidConfiguration: with ``field`` set to the offending key and the
            underlying InvalidSecretEncoding / InvalidParameter as __cause__
    """
    if not isinstance(record, Mapping):
        raise InvalidConfiguration("Generator record must be a mapping, got %s" % type(record).__name__)

    key_text = _field(record, "key")
    if not isinstance(key_text, str):
        raise InvalidConfiguration("Field 'key' must be Base32 text", field="key")
    try:
        key = base32.decode(key_text)
    except OTPError as e:
        raise InvalidConfiguration("Invalid Base32 key: %s" % e, field="key") from e

    digits = _field(record, "digits", DEFAULT_DIGITS)
    algorithm = _field(record, "algorithm", DEFAULT_ALGORITHM)
    try:
        algorithm = HashAlgorithm.parse(algorithm)
        hotp = HOTP(key, digits, algorithm)
    except OTPError as e:
        raise InvalidConfiguration(str(e), field=e.field) from e

    if record.get("period") is None:
        return hotp
    try:
        return TOTP(hotp, record["period"])
    except OTPError as e:
        raise InvalidConfiguration(str(e), field="period") from e


def load_records(data: Union[Mapping[str, Any], List[Mapping[str, Any]]]) -> List[Generator]:
    """
    Build generators from one record or a list of records.

    Extra keys such as "name" are ignored; the error of a bad entry names its
    index, e.g. field "[2].digits".
    """
    if isinstance(data, Mapping):
        return [from_dict(data)]
    if not isinstance(data, list):
        raise InvalidConfiguration("Expected a record or a list of records")
    generators = []
    for index, record in enumerate(data):
        try:
            generators.append(from_dict(record))
        except InvalidConfiguration as e:
            where = "[%d]" % index + ("." + e.field if e.field else "")
            raise InvalidConfiguration("Record %d: %s" % (index, e), field=where) from e
    return generators
