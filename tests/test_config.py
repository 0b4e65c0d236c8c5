import json
from fractions import Fraction

import pytest

from otpkit import HOTP, TOTP, HashAlgorithm, from_dict, load_records, to_dict
from otpkit.exceptions import InvalidConfiguration, InvalidParameter, InvalidSecretEncoding

from .conftest import SECRET_SHA1, SECRET_SHA1_B32, SECRET_SHA256


def test_hotp_record():
    record = to_dict(HOTP(SECRET_SHA1, digits=8))
    assert record == {"key": SECRET_SHA1_B32, "digits": 8, "algorithm": "SHA1"}
    assert from_dict(record) == HOTP(SECRET_SHA1, digits=8)


def test_totp_record_survives_json():
    totp = TOTP.from_key(SECRET_SHA256, period=60, digits=7, algorithm=HashAlgorithm.SHA256)
    record = json.loads(json.dumps(to_dict(totp)))
    assert record["period"] == 60
    assert record["algorithm"] == "SHA256"
    restored = from_dict(record)
    assert isinstance(restored, TOTP)
    assert restored == totp
    assert restored.code(1111111109) == totp.code(1111111109)


def test_fraction_period_is_written_as_float():
    record = to_dict(TOTP.from_key(SECRET_SHA1, period=Fraction(1, 2)))
    assert record["period"] == 0.5
    assert from_dict(json.loads(json.dumps(record))).period == Fraction(1, 2)
    assert to_dict(TOTP.from_key(SECRET_SHA1, period=Fraction(60)))["period"] == 60


def test_inexact_fraction_period_is_not_written():
    with pytest.raises(InvalidConfiguration) as excinfo:
        to_dict(TOTP.from_key(SECRET_SHA1, period=Fraction(1, 3)))
    assert excinfo.value.field == "period"


def test_defaults_for_missing_fields():
    generator = from_dict({"key": SECRET_SHA1_B32})
    assert isinstance(generator, HOTP)
    assert generator.digits == 6
    assert generator.algorithm is HashAlgorithm.SHA1


def test_algorithm_spelling_is_normalised():
    assert from_dict({"key": SECRET_SHA1_B32, "algorithm": "sha-256"}).algorithm is HashAlgorithm.SHA256


def test_unpadded_key_is_accepted():
    assert from_dict({"key": "JBSWY3DPEHPK3PXP"}).key == b"Hello!\xde\xad\xbe\xef"


@pytest.mark.parametrize("record, field, cause", [
    ({"digits": 6}, "key", None),
    ({"key": 1234}, "key", None),
    ({"key": "GEZDGNBV!Y3TQOJQ"}, "key", InvalidSecretEncoding),
    ({"key": SECRET_SHA1_B32, "digits": 12}, "digits", InvalidParameter),
    ({"key": SECRET_SHA1_B32, "digits": "6"}, "digits", InvalidParameter),
    ({"key": SECRET_SHA1_B32, "algorithm": "SHA3"}, "algorithm", InvalidParameter),
    ({"key": SECRET_SHA1_B32, "algorithm": "MD5"}, "algorithm", InvalidParameter),
    ({"key": SECRET_SHA1_B32, "period": 0}, "period", InvalidParameter),
    ({"key": SECRET_SHA1_B32, "period": "30"}, "period", InvalidParameter),
])
def test_invalid_records(record, field, cause):
    with pytest.raises(InvalidConfiguration) as excinfo:
        from_dict(record)
    assert excinfo.value.field == field
    if cause is not None:
        assert isinstance(excinfo.value.__cause__, cause)


def test_record_must_be_a_mapping():
    with pytest.raises(InvalidConfiguration):
        from_dict([SECRET_SHA1_B32])


def test_to_dict_rejects_other_types():
    with pytest.raises(TypeError):
        to_dict("GEZDGNBV")


def test_load_records():
    generators = load_records([
        {"name": "github", "key": "JBSWY3DPEHPK3PXP", "period": 30},
        {"name": "vpn", "key": SECRET_SHA1_B32, "digits": 8},
    ])
    assert isinstance(generators[0], TOTP)
    assert isinstance(generators[1], HOTP)
    assert load_records({"key": SECRET_SHA1_B32}) == [HOTP(SECRET_SHA1)]


def test_load_records_names_the_bad_entry():
    with pytest.raises(InvalidConfiguration) as excinfo:
        load_records([{"key": SECRET_SHA1_B32}, {"key": SECRET_SHA1_B32, "digits": 0}])
    assert excinfo.value.field == "[1].digits"
    assert "Record 1" in str(excinfo.value)


def test_load_records_rejects_other_shapes():
    with pytest.raises(InvalidConfiguration):
        load_records("GEZDGNBV")
