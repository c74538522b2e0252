from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.core.config import settings
from app.core.security import InvalidTokenError, decode_access_token


def _token(claims: dict, key: str = None) -> str:
    return jwt.encode(claims, key or settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest.mark.unit
class TestDecodeAccessToken:
    def test_valid_token(self):
        token = _token(
            {
                "sub": "owner-1",
                "role": "business",
                "email": "owner@salon.test",
                "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
            }
        )

        principal = decode_access_token(token)

        assert principal.subject == "owner-1"
        assert principal.role == "business"
        assert principal.email == "owner@salon.test"
        assert principal.claims["sub"] == "owner-1"

    def test_expired_token(self):
        token = _token(
            {
                "sub": "owner-1",
                "role": "business",
                "exp": datetime.now(timezone.utc) - timedelta(minutes=5),
            }
        )

        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_wrong_signature(self):
        token = _token({"sub": "owner-1", "role": "admin"}, key="another-secret")

        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    @pytest.mark.parametrize("claims", [{"sub": "owner-1"}, {"role": "admin"}])
    def test_missing_claims(self, claims):
        with pytest.raises(InvalidTokenError, match="missing"):
            decode_access_token(_token(claims))

    def test_garbage(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("not-a-jwt")
