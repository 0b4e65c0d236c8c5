from otpkit import base32
from otpkit_api import create_app

from .conftest import SECRET_SHA1_B32


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.get_json()
    assert data["service"] == "otpkit"
    assert "POST /api/v1/totp" in data["endpoints"]


def test_cors_header(client):
    response = client.get("/", headers={"Origin": "http://example.com"})
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_new_secret(client):
    response = client.post("/api/v1/secret")
    assert response.status_code == 200
    assert len(base32.decode(response.get_json()["key"])) == 20


def test_hotp_code(client):
    response = client.post("/api/v1/hotp", json={"key": SECRET_SHA1_B32, "counter": 1})
    assert response.status_code == 200
    assert response.get_json() == {"code": "287082", "counter": 1}


def test_totp_code(client):
    response = client.post("/api/v1/totp", json={"key": SECRET_SHA1_B32, "digits": 8, "timestamp": 59})
    assert response.status_code == 200
    assert response.get_json() == {"code": "94287082", "counter": 1, "remaining": 1.0, "period": 30}


def test_totp_code_with_period(client):
    response = client.post("/api/v1/totp", json={"key": SECRET_SHA1_B32, "period": 60, "timestamp": 59})
    data = response.get_json()
    assert data["counter"] == 0
    assert data["period"] == 60
    assert data["code"] == "755224"


def test_totp_code_now(client):
    data = client.post("/api/v1/totp", json={"key": SECRET_SHA1_B32}).get_json()
    assert len(data["code"]) == 6
    assert 0 < data["remaining"] <= 30


def test_verify_hotp(client):
    body = {"key": SECRET_SHA1_B32, "code": "359152", "counter": 0}
    assert client.post("/api/v1/verify/hotp", json=body).get_json() == {"valid": False, "next_counter": 0}
    body["look_ahead"] = 2
    assert client.post("/api/v1/verify/hotp", json=body).get_json() == {"valid": True, "next_counter": 3}


def test_verify_totp(client):
    body = {"key": SECRET_SHA1_B32, "digits": 8, "code": "94287082", "timestamp": 89}
    assert client.post("/api/v1/verify/totp", json=body).get_json() == {"valid": True}
    body["window"] = 0
    assert client.post("/api/v1/verify/totp", json=body).get_json() == {"valid": False}


def test_verify_window_from_config():
    client = create_app({"TESTING": True, "OTPKIT_VERIFY_WINDOW": 0}).test_client()
    body = {"key": SECRET_SHA1_B32, "digits": 8, "code": "94287082", "timestamp": 89}
    assert client.post("/api/v1/verify/totp", json=body).get_json() == {"valid": False}


def test_missing_body(client):
    response = client.post("/api/v1/hotp", data="counter=1")
    assert response.status_code == 400
    assert "JSON" in response.get_json()["error"]


def test_missing_field(client):
    response = client.post("/api/v1/hotp", json={"key": SECRET_SHA1_B32})
    assert response.status_code == 400
    assert "counter" in response.get_json()["error"]


def test_invalid_key(client):
    response = client.post("/api/v1/hotp", json={"key": "GEZDGNBV1", "counter": 0})
    assert response.status_code == 400
    assert response.get_json()["field"] == "key"


def test_invalid_parameters(client):
    response = client.post("/api/v1/hotp", json={"key": SECRET_SHA1_B32, "counter": "1"})
    assert response.get_json()["field"] == "counter"

    response = client.post("/api/v1/totp", json={"key": SECRET_SHA1_B32, "digits": 11})
    assert response.status_code == 400
    assert response.get_json()["field"] == "digits"

    response = client.post("/api/v1/totp", json={"key": SECRET_SHA1_B32, "timestamp": -5})
    assert response.status_code == 400
    assert response.get_json()["field"] == "timestamp"

    response = client.post("/api/v1/verify/totp", json={"key": SECRET_SHA1_B32, "code": "1", "window": -1})
    assert response.get_json()["field"] == "window"


def test_verify_hotp_look_ahead_is_capped(client):
    body = {"key": SECRET_SHA1_B32, "code": "359152", "counter": 0, "look_ahead": 1000000000}
    response = client.post("/api/v1/verify/hotp", json=body)
    assert response.status_code == 400
    assert response.get_json()["field"] == "look_ahead"

    body["look_ahead"] = 100
    assert client.post("/api/v1/verify/hotp", json=body).get_json()["valid"] is True


def test_verify_totp_window_is_capped(client):
    body = {"key": SECRET_SHA1_B32, "digits": 8, "code": "94287082", "timestamp": 89, "window": 11}
    response = client.post("/api/v1/verify/totp", json=body)
    assert response.status_code == 400
    assert response.get_json()["field"] == "window"


def test_verify_limits_from_config():
    client = create_app({"TESTING": True, "OTPKIT_MAX_LOOK_AHEAD": 1, "OTPKIT_MAX_WINDOW": 0}).test_client()
    body = {"key": SECRET_SHA1_B32, "code": "359152", "counter": 0, "look_ahead": 2}
    assert client.post("/api/v1/verify/hotp", json=body).status_code == 400
    body = {"key": SECRET_SHA1_B32, "digits": 8, "code": "94287082", "timestamp": 59}
    # the default window of 1 is above the configured limit
    response = client.post("/api/v1/verify/totp", json=body)
    assert response.status_code == 400
    assert response.get_json()["field"] == "window"
