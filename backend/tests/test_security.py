from datetime import timedelta

import pytest

from app.core.security import create_access_token, decode_token, hash_password, verify_password


def test_hash_and_verify_password():
    hashed = hash_password("s3cret-pass")

    assert hashed.startswith("$pbkdf2-sha256$")
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("other", hashed)


@pytest.mark.parametrize("stored", [None, "", "plain-text-password"])
def test_verify_password_rejects_non_hashes(stored):
    assert not verify_password("plain-text-password", stored)


def test_token_round_trip_keeps_claims():
    token = create_access_token({"sub": "7", "role": "user"})
    payload = decode_token(token)

    assert payload["sub"] == "7"
    assert payload["role"] == "user"
    assert "exp" in payload


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "7", "role": "user"}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(ValueError):
        decode_token(token)


def test_expired_token_is_unauthorized_over_http(client):
    token = create_access_token({"sub": "1", "role": "admin"}, expires_delta=timedelta(seconds=-5))
    response = client.get("/api/users", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.parametrize(
    "claims",
    [
        {"role": "admin"},
        {"sub": "abc", "role": "admin"},
        {"sub": "1.5", "role": "admin"},
        {"sub": 1.5, "role": "admin"},
        {"sub": True, "role": "admin"},
        {"sub": ["1"], "role": "admin"},
        {"sub": "1"},
        {"sub": "1", "role": "root"},
    ],
)
def test_malformed_claims_are_unauthorized(client, claims):
    token = create_access_token(claims)
    response = client.get("/api/users/1", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.parametrize("sub", [1.5, 1, True, None])
def test_non_string_sub_claim_is_unauthorized(client, monkeypatch, sub):
    from app.api import deps_auth

    monkeypatch.setattr(deps_auth, "decode_token", lambda token: {"sub": sub, "role": "admin"})

    response = client.get("/api/auth/me", headers={"Authorization": "Bearer anything"})
    assert response.status_code == 401
