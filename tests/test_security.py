from datetime import datetime, timedelta, timezone

import jwt

from core.security import TokenIssuer, normalize_answer


def test_hash_is_salted_per_call(hasher):
    first = hasher.hash("Str0ng!Pw")
    second = hasher.hash("Str0ng!Pw")

    assert first != second
    assert "Str0ng!Pw" not in first
    assert hasher.verify("Str0ng!Pw", first)
    assert hasher.verify("Str0ng!Pw", second)


def test_password_comparison_is_exact(hasher):
    stored = hasher.hash("Str0ng!Pw")

    assert not hasher.verify("str0ng!pw", stored)
    assert not hasher.verify("Str0ng!Pw ", stored)
    assert not hasher.verify("", stored)


def test_malformed_stored_hash_is_a_mismatch(hasher):
    assert hasher.verify("anything", "not-a-hash") is False


def test_answer_normalization():
    assert normalize_answer("  Rex ") == "rex"
    assert normalize_answer("REX") == "rex"


def test_answer_verification_ignores_case_and_outer_whitespace(hasher):
    stored = hasher.hash_answer("Rex ")

    assert hasher.verify_answer(" rex", stored)
    assert hasher.verify_answer("REX", stored)
    assert not hasher.verify_answer("Rexy", stored)
    assert not hasher.verify_answer("R ex", stored)


def test_token_expiry_is_exactly_the_window(issuer):
    issued = issuer.issue(7)
    claims = issuer.decode(issued.token)

    assert claims["user_id"] == 7
    assert claims["exp"] - claims["iat"] == 48 * 3600
    assert issued.expires_at - issued.issued_at == timedelta(hours=48)
    assert datetime.fromtimestamp(claims["exp"], tz=timezone.utc) == issued.expires_at


def test_issued_at_is_truncated_to_seconds(issuer):
    at = datetime.now(timezone.utc).replace(microsecond=987654) - timedelta(minutes=1)
    issued = issuer.issue(1, issued_at=at)

    assert issued.issued_at == at.replace(microsecond=0)
    assert issuer.expiry_of(issued.token) == issued.expires_at


def test_tokens_for_same_user_and_second_are_distinct(issuer):
    at = datetime.now(timezone.utc)

    assert issuer.issue(1, issued_at=at).token != issuer.issue(1, issued_at=at).token


def test_tampered_token_is_rejected(issuer):
    token = issuer.issue(1).token
    header, payload, signature = token.split(".")
    forged = jwt.encode({"user_id": 2}, "another-secret-0123456789abcdef0123", algorithm="HS256")

    assert issuer.decode(forged) is None
    assert issuer.decode(f"{header}.{payload}.{signature[::-1]}") is None
    assert issuer.decode("garbage") is None


def test_expired_token_fails_decode_but_still_shows_expiry(issuer):
    short = TokenIssuer(secret_key="unit-test-signing-secret-0123456789abcdef", ttl=timedelta(hours=1))
    issued = short.issue(1, issued_at=datetime.now(timezone.utc) - timedelta(hours=2))

    assert short.decode(issued.token) is None
    assert short.expiry_of(issued.token) == issued.expires_at


def test_oversized_password_is_a_quiet_mismatch(hasher, monkeypatch):
    import core.security

    warnings = []
    monkeypatch.setattr(core.security.logger, "warning", lambda *args: warnings.append(args))
    stored = hasher.hash("Str0ng!Pw")

    assert hasher.verify("x" * 5000, stored) is False
    assert warnings == []


def test_hasher_limit_matches_passlib(hasher):
    assert hasher.max_secret_bytes == 4096
