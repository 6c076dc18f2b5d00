"""Tests for bearer token issuing and verification"""

import jwt
import pytest
from datetime import timedelta

from resetdesk.domain.enums import Role
from resetdesk.domain.errors import AuthenticationError, InvalidTokenError
from resetdesk.repositories.personnel_repo import PersonnelRepository
from resetdesk.utils.jwt import TokenService
from resetdesk.utils.time import utc_now

SECRET = "test-secret"


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret=SECRET, algorithm="HS256", expire_hours=24)


def test_round_trip_preserves_identity(seeded, tokens):
    personnel = PersonnelRepository().get_by_nrp("22222222")

    actor = tokens.get_actor_context(tokens.issue(personnel))

    assert actor.personnel_id == personnel.personnel_id
    assert actor.nrp == "22222222"
    assert actor.role == Role.UNIT_ADMIN
    assert actor.unit_id == personnel.unit_id
    assert actor.unit_name == "POLRES MALANG"


def test_token_expires_after_24_hours(seeded, tokens):
    personnel = PersonnelRepository().get_by_nrp("11111111")
    claims = tokens.validate_token(tokens.issue(personnel))

    assert claims["exp"] - claims["iat"] == 24 * 3600
    assert tokens.expires_in == 24 * 3600


def test_bearer_prefix_is_accepted(seeded, tokens):
    personnel = PersonnelRepository().get_by_nrp("11111111")
    actor = tokens.get_actor_context(f"Bearer {tokens.issue(personnel)}")
    assert actor.role == Role.SUPERADMIN


def test_missing_token_is_unauthenticated(tokens):
    with pytest.raises(AuthenticationError) as exc_info:
        tokens.validate_token(None)
    assert exc_info.value.http_status == 401


def test_malformed_token_is_rejected(tokens):
    with pytest.raises(InvalidTokenError) as exc_info:
        tokens.validate_token("not-a-jwt")
    assert exc_info.value.http_status == 403


def test_token_signed_with_other_secret_is_rejected(seeded, tokens):
    personnel = PersonnelRepository().get_by_nrp("11111111")
    forged = TokenService(secret="other-secret").issue(personnel)

    with pytest.raises(InvalidTokenError):
        tokens.validate_token(forged)


def test_expired_token_is_rejected(tokens):
    past = utc_now() - timedelta(days=2)
    expired = jwt.encode(
        {"sub": "PRS-1", "nrp": "1", "name": "X", "role": "USER", "iat": past, "exp": past + timedelta(hours=1)},
        SECRET,
        algorithm="HS256"
    )

    with pytest.raises(InvalidTokenError):
        tokens.validate_token(expired)


def test_unknown_role_claim_is_rejected(tokens):
    now = utc_now()
    token = jwt.encode(
        {"sub": "PRS-1", "nrp": "1", "name": "X", "role": "ROOT", "iat": now, "exp": now + timedelta(hours=1)},
        SECRET,
        algorithm="HS256"
    )

    with pytest.raises(InvalidTokenError):
        tokens.get_actor_context(token)
