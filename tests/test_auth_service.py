"""
Tests for AuthService over the local store
"""
import json
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from smartstudy.config import settings
from smartstudy.models.auth import Session, UpdateProfileRequest, User
from smartstudy.services.auth_service import AuthService
from smartstudy.utils.errors import AuthError, ConflictError, ValidationError
from smartstudy.utils.tokens import issue_token


async def test_signup_persists_session(auth, storage):
    user = await auth.signup("Ada", "Ada@Example.com ", "secret1", "secret1")

    assert user.email == "ada@example.com"
    assert (await auth.get_current_user()) == user
    assert json.loads(storage.get_item("smartstudy_auth"))["id"] == user.id


async def test_signup_password_length_boundary(auth):
    with pytest.raises(ValidationError):
        await auth.signup("Ada", "ada@example.com", "12345", "12345")

    user = await auth.signup("Ada", "ada@example.com", "123456", "123456")
    assert user.name == "Ada"


async def test_signup_password_mismatch(auth):
    with pytest.raises(ValidationError, match="do not match"):
        await auth.signup("Ada", "ada@example.com", "secret1", "secret2")


async def test_signup_requires_name(auth):
    with pytest.raises(ValidationError):
        await auth.signup("  ", "ada@example.com", "secret1", "secret1")


async def test_signup_duplicate_email(auth, session):
    with pytest.raises(ConflictError):
        await auth.signup("Other Ada", "ADA@example.com", "secret9", "secret9")


async def test_password_is_stored_hashed(auth, session, storage):
    users = json.loads(storage.get_item("smartstudy_users"))
    assert users[0]["passwordHash"].startswith("pbkdf2_sha256$")
    assert "secret1" not in storage.get_item("smartstudy_users")
    # The session record never carries the hash
    assert "passwordHash" not in json.loads(storage.get_item("smartstudy_auth"))


async def test_login_unknown_user(auth):
    with pytest.raises(AuthError, match="User not found"):
        await auth.login("ghost@example.com", "secret1")


async def test_login_wrong_password(auth, session):
    with pytest.raises(AuthError, match="Invalid password"):
        await auth.login("ada@example.com", "wrong-password")


async def test_logout_then_login(auth, session):
    await auth.logout()
    assert await auth.get_current_user() is None
    assert await auth.current_session() is None

    user = await auth.login("ada@example.com", "secret1")
    assert user.id == session.user.id
    current = await auth.current_session()
    assert current.user_id == session.user_id


async def test_logout_succeeds_when_backend_fails(failing_store):
    auth = AuthService(failing_store)
    await auth.logout()
    assert await auth.get_current_user() is None


async def test_corrupt_session_record_reads_as_logged_out(auth, storage):
    storage.set_item("smartstudy_auth", "{broken")
    assert await auth.get_current_user() is None


async def test_update_profile_requires_session(auth):
    with pytest.raises(AuthError):
        await auth.update_profile(None, UpdateProfileRequest(name="Nobody"))


async def test_update_profile_merges_and_persists(auth, session):
    updated = await auth.update_profile(session, UpdateProfileRequest(name="Ada King"))

    assert updated.name == "Ada King"
    assert updated.email == "ada@example.com"
    assert updated.id == session.user_id
    assert session.user == updated
    assert (await auth.get_current_user()).name == "Ada King"


async def test_update_profile_email_is_used_for_login(auth, session):
    await auth.update_profile(session, UpdateProfileRequest(email="ada.king@example.com"))
    await auth.logout()

    user = await auth.login("ada.king@example.com", "secret1")
    assert user.name == "Ada Lovelace"
    with pytest.raises(AuthError):
        await auth.login("ada@example.com", "secret1")


async def test_update_profile_email_conflict(auth, session, other_session):
    with pytest.raises(ConflictError):
        await auth.update_profile(other_session, UpdateProfileRequest(email="ada@example.com"))


async def test_update_profile_with_nothing_set_is_noop(auth, session):
    assert await auth.update_profile(session, UpdateProfileRequest()) == session.user


async def test_sessions_are_explicit(auth, session, other_session):
    # The persisted session belongs to whoever signed up last
    assert (await auth.get_current_user()).id == other_session.user_id
    assert isinstance(session, Session) and session.user_id != other_session.user_id


# ---------------------------------------------------------------------------
# Bearer tokens
# ---------------------------------------------------------------------------


async def test_register_returns_session_with_token(auth, session):
    assert session.access_token
    resolved = await auth.session_for_token(session.access_token)
    assert resolved.user == session.user
    assert resolved.access_token == session.access_token


async def test_each_token_resolves_to_its_own_user(auth, session, other_session):
    assert (await auth.session_for_token(session.access_token)).user_id == session.user_id
    assert (await auth.session_for_token(other_session.access_token)).user_id == other_session.user_id


async def test_token_sees_profile_changes(auth, session):
    await auth.update_profile(session, UpdateProfileRequest(name="Ada King"))
    assert (await auth.session_for_token(session.access_token)).user.name == "Ada King"


async def test_forged_token_is_rejected(auth, session):
    forged = jwt.encode(
        {"sub": session.user_id, "aud": settings.JWT_AUDIENCE},
        "not-the-server-secret-0123456789abcdef",
        algorithm="HS256",
    )
    with pytest.raises(AuthError, match="Invalid token"):
        await auth.session_for_token(forged)
    with pytest.raises(AuthError):
        await auth.session_for_token("not-a-jwt")
    with pytest.raises(AuthError):
        await auth.session_for_token("")


async def test_expired_token_is_rejected(auth, session):
    expired = jwt.encode(
        {"sub": session.user_id, "aud": settings.JWT_AUDIENCE,
         "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(AuthError, match="Token expired"):
        await auth.session_for_token(expired)


async def test_token_for_unknown_user(auth):
    ghost = User(id="ghost", name="Ghost", email="ghost@example.com")
    with pytest.raises(AuthError, match="User not found"):
        await auth.session_for_token(issue_token(ghost))


# ---------------------------------------------------------------------------
# Password change
# ---------------------------------------------------------------------------


async def test_change_password(auth, session, storage):
    before = json.loads(storage.get_item("smartstudy_users"))[0]["passwordHash"]

    await auth.change_password(session, "better-secret", "better-secret")

    after = json.loads(storage.get_item("smartstudy_users"))[0]["passwordHash"]
    assert after != before and after.startswith("pbkdf2_sha256$")
    assert "better-secret" not in storage.get_item("smartstudy_users")
    with pytest.raises(AuthError, match="Invalid password"):
        await auth.login("ada@example.com", "secret1")
    assert (await auth.login("ada@example.com", "better-secret")).id == session.user_id
    # The user record itself never gains a password field
    assert "password" not in session.user.model_dump()


async def test_change_password_rules(auth, session):
    with pytest.raises(ValidationError, match="do not match"):
        await auth.change_password(session, "secret99", "secret98")
    with pytest.raises(ValidationError, match="at least 6"):
        await auth.change_password(session, "12345", "12345")
    with pytest.raises(AuthError):
        await auth.change_password(None, "secret99", "secret99")

    # Length 6 is enough
    await auth.change_password(session, "123456", "123456")
    assert (await auth.login("ada@example.com", "123456")).id == session.user_id


async def test_change_password_only_touches_own_account(auth, session, other_session):
    await auth.change_password(other_session, "bob-new-pass", "bob-new-pass")
    assert (await auth.login("ada@example.com", "secret1")).id == session.user_id
