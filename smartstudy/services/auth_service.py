"""
Identity service for SmartStudy.

Validates input, then delegates credential checks and session persistence
to the backing store's auth provider.  Read paths (current user) degrade
to None on provider failure; logout always succeeds.

Two ways to get a Session: ``current_session()`` reads the one persisted
by the last login in this process, for single-user callers.  Servers use
``session_for_token()`` and pass each caller's bearer token.
"""
from typing import Optional

from smartstudy.config import settings
from smartstudy.db.base import BackingStore
from smartstudy.models.auth import Session, UpdateProfileRequest, User
from smartstudy.utils.errors import AuthError, SmartStudyError, ValidationError
from smartstudy.utils.logger import get_logger

logger = get_logger(__name__)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _check_new_password(password: str, confirm_password: str):
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    if len(password or "") < settings.MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )


class AuthService:
    """Login, signup, logout, profile and password updates over one backing store"""

    def __init__(self, store: BackingStore):
        self.store = store
        self.provider = store.auth

    async def get_current_user(self) -> Optional[User]:
        """User of the active session, or None (never raises)"""
        try:
            return await self.provider.get_session_user()
        except Exception as e:
            logger.error(f"Error reading current session: {e}")
            return None

    async def current_session(self) -> Optional[Session]:
        """Session context for repository calls, or None when logged out"""
        user = await self.get_current_user()
        return Session(user=user) if user else None

    async def session_for_token(self, token: str) -> Session:
        """Session for a bearer token; AuthError if it is expired, forged or unknown"""
        if not token:
            raise AuthError("Not authenticated")
        user = await self.provider.resolve_token(token)
        return Session(user=user, access_token=token)

    async def start_session(self, email: str, password: str) -> Session:
        """Log in and return the new session with its access token"""
        email = _normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        session = await self.provider.sign_in(email, password)
        logger.info(f"Login succeeded for {email}")
        return session

    async def login(self, email: str, password: str) -> User:
        return (await self.start_session(email, password)).user

    async def register(self, name: str, email: str, password: str, confirm_password: str) -> Session:
        """Create an account and return its first session"""
        name = (name or "").strip()
        email = _normalize_email(email)

        if not name or not email:
            raise ValidationError("Name and email are required")
        _check_new_password(password, confirm_password)

        session = await self.provider.sign_up(name, email, password)
        logger.info(f"Signup succeeded for {email}")
        return session

    async def signup(self, name: str, email: str, password: str, confirm_password: str) -> User:
        return (await self.register(name, email, password, confirm_password)).user

    async def logout(self) -> None:
        """Clear the session. Provider errors are logged, never raised."""
        try:
            await self.provider.sign_out()
        except Exception as e:
            logger.warning(f"Sign out failed, treating user as logged out anyway: {e}")

    async def update_profile(self, session: Optional[Session], data: UpdateProfileRequest) -> User:
        if session is None:
            raise AuthError("Not authenticated")

        fields = data.model_dump(exclude_none=True)
        if "name" in fields:
            fields["name"] = fields["name"].strip()
            if not fields["name"]:
                raise ValidationError("Name cannot be empty")
        if "email" in fields:
            fields["email"] = _normalize_email(fields["email"])
            if not fields["email"]:
                raise ValidationError("Email cannot be empty")

        if not fields:
            return session.user

        try:
            updated = await self.provider.update_user(session, fields)
        except SmartStudyError as e:
            logger.error(f"Profile update failed for user {session.user_id}: {e.message}")
            raise

        session.user = updated
        logger.info(f"Updated profile for user {updated.id}")
        return updated

    async def change_password(self, session: Optional[Session], new_password: str, confirm_password: str) -> None:
        """Replace the session user's password; same rules as at signup"""
        if session is None:
            raise AuthError("Not authenticated")
        _check_new_password(new_password, confirm_password)

        try:
            await self.provider.update_user(session, {"password": new_password})
        except SmartStudyError as e:
            logger.error(f"Password change failed for user {session.user_id}: {e.message}")
            raise
        logger.info(f"Changed password for user {session.user_id}")
