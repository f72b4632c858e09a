"""Password hashing and bearer token issuance/verification."""

from __future__ import annotations

import time

import jwt
import pytest

from taskboard.auth import Identity, TokenIssuer, hash_password, verify_password
from taskboard.errors import TokenError, TokenExpired, TokenInvalidSignature, TokenMalformed

from .conftest import TEST_SECRET


class TestPasswordHashing:
    def test_hash_verifies(self) -> None:
        h = hash_password("pw1", iters=1_000)
        assert h.startswith("pbkdf2_sha256$1000$")
        assert verify_password("pw1", h)

    def test_wrong_password_rejected(self) -> None:
        h = hash_password("pw1", iters=1_000)
        assert not verify_password("pw2", h)

    def test_salted(self) -> None:
        assert hash_password("pw1", iters=1_000) != hash_password("pw1", iters=1_000)

    def test_lone_surrogate_password(self) -> None:
        h = hash_password("\ud800", iters=1_000)
        assert verify_password("\ud800", h)
        assert not verify_password("\udc00", h)

    def test_hash_never_contains_plaintext(self) -> None:
        assert "hunter2" not in hash_password("hunter2", iters=1_000)

    @pytest.mark.parametrize(
        "bad_hash",
        ["", None, "garbage", "bcrypt$10$abc$def", "pbkdf2_sha256$notanint$abc$def", "pbkdf2_sha256$1000$!!$??"],
    )
    def test_malformed_hash_is_no_match(self, bad_hash) -> None:
        assert verify_password("pw1", bad_hash) is False


class TestTokenIssuer:
    @pytest.fixture
    def issuer(self) -> TokenIssuer:
        return TokenIssuer(TEST_SECRET)

    def test_round_trip(self, issuer: TokenIssuer) -> None:
        token = issuer.issue(7, "a@x.com")
        assert issuer.verify(token) == Identity(id=7, email="a@x.com")

    def test_expiry_is_eight_hours(self, issuer: TokenIssuer) -> None:
        now = int(time.time())
        claims = jwt.decode(issuer.issue(7, "a@x.com", now=now), TEST_SECRET, algorithms=["HS256"])
        assert claims["exp"] - claims["iat"] == 8 * 60 * 60

    def test_expired(self, issuer: TokenIssuer) -> None:
        token = issuer.issue(7, "a@x.com", now=int(time.time()) - 9 * 60 * 60)
        with pytest.raises(TokenExpired) as ei:
            issuer.verify(token)
        assert ei.value.reason == "expired"

    def test_wrong_secret(self, issuer: TokenIssuer) -> None:
        other = TokenIssuer("another-secret-0123456789abcdef012345")
        with pytest.raises(TokenInvalidSignature):
            issuer.verify(other.issue(7, "a@x.com"))

    def test_tampered_payload(self, issuer: TokenIssuer) -> None:
        header, _, sig = issuer.issue(7, "a@x.com").split(".")
        _, forged_payload, _ = issuer.issue(8, "b@x.com").split(".")
        with pytest.raises(TokenInvalidSignature):
            issuer.verify(f"{header}.{forged_payload}.{sig}")

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b", "a.b.c"])
    def test_malformed(self, issuer: TokenIssuer, token: str) -> None:
        with pytest.raises(TokenMalformed):
            issuer.verify(token)

    def test_missing_identity_claims(self, issuer: TokenIssuer) -> None:
        now = int(time.time())
        token = jwt.encode({"iat": now, "exp": now + 60}, TEST_SECRET, algorithm="HS256")
        with pytest.raises(TokenMalformed):
            issuer.verify(token)

    def test_variants_share_client_message(self) -> None:
        assert {TokenMalformed().detail, TokenInvalidSignature().detail, TokenExpired().detail} == {
            TokenError.message
        }
        assert len({TokenMalformed.reason, TokenInvalidSignature.reason, TokenExpired.reason}) == 3
