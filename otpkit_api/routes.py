"""
OTP API ROUTES - FLASK BLUEPRINT

REST endpoints around otpkit. The server keeps no secrets: every request
carries the generator record it wants computed
({"key": <Base32>, "digits": 6, "algorithm": "SHA1", "period": 30}).

EXAMPLES:
curl -X POST http://localhost:5000/api/v1/secret
curl -X POST http://localhost:5000/api/v1/totp -H "Content-Type: application/json" \
     -d '{"key": "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", "period": 30}'
curl -X POST http://localhost:5000/api/v1/verify/hotp -H "Content-Type: application/json" \
     -d '{"key": "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", "code": "755224", "counter": 0}'
"""

import logging
import time

from flask import Blueprint, current_app, jsonify, request

from otpkit import HOTP, TOTP, from_dict, generate_secret
from otpkit.exceptions import InvalidParameter, OTPError
from otpkit.totp import DEFAULT_PERIOD

logger = logging.getLogger(__name__)

otp_bp = Blueprint('otp_v1', __name__, url_prefix='/api/v1')


class BadRequest(Exception):
    """Request body missing or malformed."""


@otp_bp.errorhandler(BadRequest)
def handle_bad_request(error):
    return jsonify({"error": str(error)}), 400


@otp_bp.errorhandler(OTPError)
def handle_otp_error(error):
    logger.info("Rejected request: %s", error)
    return jsonify({"error": str(error), "field": error.field}), 400


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("JSON object body is required")
    return data


def _require(data: dict, name: str):
    if name not in data:
        raise BadRequest(f"Field '{name}' is required in JSON body")
    return data[name]


def _int_field(data: dict, name: str, default=None) -> int:
    value = data.get(name, default) if default is not None else _require(data, name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter(f"{name} must be an integer", field=name)
    return value


def _bounded_int_field(data: dict, name: str, default: int, limit_setting: str) -> int:
    value = _int_field(data, name, default)
    limit = current_app.config[limit_setting]
    if value > limit:
        raise InvalidParameter(f"{name} must not exceed {limit}", field=name)
    return value


def _hotp(data: dict) -> HOTP:
    generator = from_dict(data)
    return generator.hotp if isinstance(generator, TOTP) else generator


def _totp(data: dict) -> TOTP:
    generator = from_dict(data)
    if isinstance(generator, TOTP):
        return generator
    return TOTP(generator, DEFAULT_PERIOD)


def _timestamp(data: dict) -> float:
    timestamp = data.get("timestamp")
    return time.time() if timestamp is None else timestamp


@otp_bp.route('/secret', methods=['POST'])
def new_secret():
    """
    Fresh random Base32 secret.

      curl -X POST http://localhost:5000/api/v1/secret
    """
    return jsonify({"key": generate_secret()})


@otp_bp.route('/hotp', methods=['POST'])
def hotp_code():
    """
    HOTP code for a counter.
    Body: record + {"counter": 0}
    """
    data = _json_body()
    counter = _int_field(data, "counter")
    code = _hotp(data).code(counter)
    return jsonify({"code": code, "counter": counter})


@otp_bp.route('/totp', methods=['POST'])
def totp_code():
    """
    TOTP code for now, or for "timestamp" when given.
    Body: record (+ {"timestamp": 59})
    """
    data = _json_body()
    totp = _totp(data)
    timestamp = _timestamp(data)
    return jsonify({
        "code": totp.code(timestamp),
        "counter": totp.counter_at(timestamp),
        "remaining": totp.time_remaining(timestamp),
        "period": totp.period,
    })


@otp_bp.route('/verify/hotp', methods=['POST'])
def verify_hotp():
    """
    Verify an HOTP code.
    Body: record + {"code": "755224", "counter": 0, "look_ahead": 1}
    """
    data = _json_body()
    code = str(_require(data, "code"))
    counter = _int_field(data, "counter")
    look_ahead = _bounded_int_field(data, "look_ahead", 0, "OTPKIT_MAX_LOOK_AHEAD")
    ok, next_counter = _hotp(data).verify(code, counter, look_ahead=look_ahead)
    return jsonify({"valid": ok, "next_counter": next_counter})


@otp_bp.route('/verify/totp', methods=['POST'])
def verify_totp():
    """
    Verify a TOTP code.
    Body: record + {"code": "94287082"} (+ "timestamp", "window")
    """
    data = _json_body()
    code = str(_require(data, "code"))
    window = _bounded_int_field(data, "window", current_app.config["OTPKIT_VERIFY_WINDOW"], "OTPKIT_MAX_WINDOW")
    is_valid = _totp(data).verify(code, at=_timestamp(data), window=window)
    return jsonify({"valid": is_valid})
