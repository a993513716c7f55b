"""Unit tests for JWTAuthProvider.

Covers:
- round trip of host-issued HS256 tokens
- validate_token returning None for missing or malformed claims
- role claim parsing
"""

import pytest
from jose import jwt as jose_jwt

from domain.entities.user import UserRole
from infrastructure.auth.jwt_provider import JWTAuthProvider, parse_role
from infrastructure.auth.provider import TokenUser

SECRET = "test-secret"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_token(payload: dict, secret: str = SECRET) -> str:
    """Create an HS256-signed JWT with a given payload."""
    return jose_jwt.encode(payload, secret, algorithm="HS256")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def provider() -> JWTAuthProvider:
    return JWTAuthProvider(secret_key=SECRET, algorithm="HS256", expire_minutes=30)


# ---------------------------------------------------------------------------
# Tests: round trip
# ---------------------------------------------------------------------------


class TestTokenRoundTrip:
    async def test_should_restore_caller_from_created_token(self, provider: JWTAuthProvider):
        user = TokenUser(id=42, email="admin@example.com", tenant_id=5, role=UserRole.TENANT_ADMIN)

        result = await provider.validate_token(provider.create_token(user))

        assert result == user

    async def test_should_encode_role_as_lowercase_name(self, provider: JWTAuthProvider):
        user = TokenUser(id=1, email="root@example.com", role=UserRole.SUPER_ADMIN)

        payload = jose_jwt.decode(provider.create_token(user), SECRET, algorithms=["HS256"])

        assert payload["role"] == "super_admin"
        assert payload["sub"] == "1"
        assert payload["tenant_id"] == 0

    async def test_should_reject_token_signed_with_other_secret(self, provider: JWTAuthProvider):
        token = _make_token({"sub": "1", "email": "a@example.com"}, secret="other")

        assert await provider.validate_token(token) is None

    async def test_should_reject_expired_token(self, provider: JWTAuthProvider):
        token = _make_token({"sub": "1", "email": "a@example.com", "exp": 1})

        assert await provider.validate_token(token) is None

    async def test_should_reject_garbage(self, provider: JWTAuthProvider):
        assert await provider.validate_token("not-a-jwt") is None


# ---------------------------------------------------------------------------
# Tests: validate_token returns None for missing claims
# ---------------------------------------------------------------------------


class TestValidateTokenMissingClaims:
    """validate_token should return None when the decoded payload is missing
    the required 'sub' or 'email' claims or carries non-numeric IDs."""

    async def test_should_return_none_when_token_has_no_sub_claim(
        self, provider: JWTAuthProvider
    ):
        token = _make_token({"email": "user@example.com", "exp": 9999999999})

        assert await provider.validate_token(token) is None

    async def test_should_return_none_when_token_has_no_email_claim(
        self, provider: JWTAuthProvider
    ):
        token = _make_token({"sub": "7", "exp": 9999999999})

        assert await provider.validate_token(token) is None

    async def test_should_return_none_when_sub_is_not_numeric(self, provider: JWTAuthProvider):
        token = _make_token({"sub": "abc", "email": "user@example.com", "exp": 9999999999})

        assert await provider.validate_token(token) is None

    async def test_should_return_none_when_tenant_is_not_numeric(
        self, provider: JWTAuthProvider
    ):
        token = _make_token(
            {"sub": "7", "email": "user@example.com", "tenant_id": "acme", "exp": 9999999999}
        )

        assert await provider.validate_token(token) is None

    async def test_should_default_to_normal_user_without_role(self, provider: JWTAuthProvider):
        token = _make_token({"sub": "7", "email": "user@example.com", "exp": 9999999999})

        result = await provider.validate_token(token)

        assert result is not None
        assert result.role == UserRole.NORMAL_USER
        assert result.tenant_id == 0


# ---------------------------------------------------------------------------
# Tests: parse_role
# ---------------------------------------------------------------------------


class TestParseRole:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("tenant_admin", UserRole.TENANT_ADMIN),
            ("SUPER_ADMIN", UserRole.SUPER_ADMIN),
            ("10", UserRole.NORMAL_USER),
            (20, UserRole.TENANT_ADMIN),
            ("authenticated", UserRole.ANONYMOUS),
            (99, UserRole.ANONYMOUS),
            (None, UserRole.ANONYMOUS),
        ],
    )
    def test_parse_role(self, value, expected):
        assert parse_role(value) == expected
