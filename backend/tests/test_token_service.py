"""
Postboard Backend — Token Service Unit Tests
==============================================

What we test:
    ✅ issue → verify recovers the user id
    ✅ default lifetime is 100 hours
    ✅ expired, tampered, foreign-secret, malformed and empty tokens are rejected
    ✅ tokens without a well-formed user claim are rejected
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from postboard.config import Settings
from postboard.exceptions import InvalidTokenError
from postboard.services.token_service import TokenService

SECRET = "unit-test-secret-that-is-long-enough-for-hs256"


class TestTokenIssueVerify:

    def setup_method(self):
        self.service = TokenService(secret=SECRET)

    def test_round_trip_recovers_user_id(self):
        user_id = uuid.uuid4()
        token = self.service.issue(user_id)

        identity = self.service.verify(token)

        assert identity.id == user_id

    def test_payload_shape_and_lifetime(self):
        user_id = uuid.uuid4()
        token = self.service.issue(user_id)

        payload = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert payload["user"] == {"id": str(user_id)}
        assert payload["exp"] - payload["iat"] == 360_000

    def test_from_settings_uses_configured_values(self):
        config = Settings(jwt_secret=SECRET, jwt_expires_in=600)
        service = TokenService.from_settings(config)

        assert service.secret == SECRET
        assert service.expires_in == 600
        assert service.algorithm == "HS256"


class TestTokenRejection:

    def setup_method(self):
        self.service = TokenService(secret=SECRET)

    def test_expired_token_rejected(self):
        issued = datetime.now(timezone.utc) - timedelta(seconds=360_001)
        token = self.service.issue(uuid.uuid4(), now=issued)

        with pytest.raises(InvalidTokenError) as exc_info:
            self.service.verify(token)
        assert exc_info.value.context["reason"] == "expired"

    def test_token_signed_with_other_secret_rejected(self):
        other = TokenService(secret="another-secret-that-is-also-long-enough")
        token = other.issue(uuid.uuid4())

        with pytest.raises(InvalidTokenError):
            self.service.verify(token)

    def test_tampered_token_rejected(self):
        token = self.service.issue(uuid.uuid4())
        other = self.service.issue(uuid.uuid4())
        header, _, signature = token.split(".")
        forged = ".".join([header, other.split(".")[1], signature])

        with pytest.raises(InvalidTokenError):
            self.service.verify(forged)

    @pytest.mark.parametrize("token", ["", None, "not-a-jwt", "a.b.c"])
    def test_malformed_or_missing_token_rejected(self, token):
        with pytest.raises(InvalidTokenError):
            self.service.verify(token)

    def test_token_without_user_claim_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode({"sub": "x", "exp": now + timedelta(hours=1)}, SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            self.service.verify(token)

    def test_token_with_non_uuid_user_id_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"user": {"id": "5f1d7c"}, "exp": now + timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            self.service.verify(token)

    def test_token_without_expiry_rejected(self):
        token = jwt.encode({"user": {"id": str(uuid.uuid4())}}, SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            self.service.verify(token)
