import time

import pytest
from fastapi import HTTPException
from jose import jws, jwt

from juris import config
from juris.auth import verify_supabase_token
from juris.models import Profile

SECRET = "test-jwt-secret"


def make_token(secret: str = SECRET, **overrides) -> str:
    now = int(time.time())
    claims = {
        "sub": "5d7c2e1a-1111-4c8b-9c1e-222233334444",
        "email": "maitre.fall@example.sn",
        "aud": "authenticated",
        "iat": now,
        "exp": now + 3600,
        "user_metadata": {"firm_name": "Cabinet Fall"},
    }
    claims.update(overrides)
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    monkeypatch.setattr(config, "SUPABASE_JWT_SECRET", SECRET)
    monkeypatch.setattr(config, "SUPABASE_JWT_AUDIENCE", "authenticated")


class TestVerifyToken:
    def test_valid_token(self):
        claims = verify_supabase_token(make_token())
        assert claims["email"] == "maitre.fall@example.sn"

    def test_wrong_signature(self):
        with pytest.raises(HTTPException) as exc:
            verify_supabase_token(make_token(secret="another-secret"))
        assert exc.value.status_code == 401
        assert exc.value.detail == "Invalid token signature"

    def test_expired(self):
        with pytest.raises(HTTPException) as exc:
            verify_supabase_token(make_token(exp=int(time.time()) - 3600))
        assert exc.value.status_code == 401
        assert exc.value.headers == {"X-Token-Expired": "true"}

    def test_wrong_audience(self):
        with pytest.raises(HTTPException) as exc:
            verify_supabase_token(make_token(aud="anon"))
        assert exc.value.detail == "Invalid token audience"

    def test_audience_list(self):
        claims = verify_supabase_token(make_token(aud=["authenticated", "other"]))
        assert claims["sub"]

    def test_issued_in_the_future(self):
        with pytest.raises(HTTPException) as exc:
            verify_supabase_token(make_token(iat=int(time.time()) + 3600))
        assert exc.value.status_code == 401

    def test_malformed(self):
        with pytest.raises(HTTPException) as exc:
            verify_supabase_token("not.a-jwt")
        assert exc.value.status_code == 401

    def test_payload_that_is_not_an_object(self):
        token = jws.sign(b"[]", SECRET, algorithm="HS256")
        with pytest.raises(HTTPException) as exc:
            verify_supabase_token(token)
        assert exc.value.status_code == 401

    def test_expiry_that_is_not_a_number(self):
        with pytest.raises(HTTPException) as exc:
            verify_supabase_token(make_token(exp="tomorrow"))
        assert exc.value.status_code == 401
        assert exc.value.detail == "Invalid token"

    def test_missing_secret(self, monkeypatch):
        monkeypatch.setattr(config, "SUPABASE_JWT_SECRET", None)
        with pytest.raises(HTTPException) as exc:
            verify_supabase_token(make_token())
        assert exc.value.status_code == 500


class TestCurrentFirm:
    def test_first_login_creates_profile(self, anonymous_client, db_session):
        response = anonymous_client.get(
            "/subscription/status", headers={"Authorization": f"Bearer {make_token()}"}
        )

        assert response.status_code == 200
        profile = db_session.query(Profile).one()
        assert profile.firm_name == "Cabinet Fall"
        assert profile.email == "maitre.fall@example.sn"
        assert response.json()["is_active"] is False

    def test_missing_header(self, anonymous_client):
        response = anonymous_client.get("/clients")
        assert response.status_code in (401, 403)

    def test_bad_token(self, anonymous_client):
        response = anonymous_client.get(
            "/clients", headers={"Authorization": f"Bearer {make_token(secret='nope')}"}
        )
        assert response.status_code == 401
