"""Backing store backed by Supabase.

Translates recorded ``QueryBuilder`` operations onto the PostgREST query
builder of an async Supabase client, and wraps Supabase Auth as the
store's ``AuthProvider``.  Tables (``notes``, ``quizzes``,
``quiz_results``) use the same snake_case columns the services speak, so
rows pass through unchanged.
"""

from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional

from smartstudy.db.base import (
    AuthProvider,
    BackingStore,
    QueryBuilder,
    StoreError,
    StoreResponse,
)
from smartstudy.db.supabase_client import create_supabase_client
from smartstudy.models.auth import Session, User
from smartstudy.utils.errors import AuthError, ConflictError, RemoteError
from smartstudy.utils.logger import get_logger
from smartstudy.utils.tokens import SupabaseTokenVerifier

logger = get_logger(__name__)

ClientFactory = Callable[[Optional[str]], Awaitable[Any]]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _error_message(exc: Exception) -> str:
    """PostgREST and GoTrue errors carry a ``message``; fall back to str()"""
    return getattr(exc, "message", None) or str(exc) or type(exc).__name__


def _is_conflict(message: str) -> bool:
    lowered = message.lower()
    return "already registered" in lowered or "already exists" in lowered or "already been registered" in lowered


def _to_user(sb_user: Any) -> User:
    """Map a Supabase Auth user onto our User; the name lives in user_metadata"""
    metadata = getattr(sb_user, "user_metadata", None) or {}
    created_at = getattr(sb_user, "created_at", "") or ""
    if isinstance(created_at, datetime):
        created_at = created_at.isoformat(timespec="microseconds")
    return User(
        id=str(sb_user.id),
        name=metadata.get("name", ""),
        email=getattr(sb_user, "email", "") or "",
        created_at=created_at,
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SupabaseStore(BackingStore):
    """
    Backing store over async Supabase clients.

    ``client_factory(access_token)`` returns a client acting as that token's
    user; every query gets its own, so no session leaks between callers.
    """

    name = "supabase"

    def __init__(self, client_factory: ClientFactory = None, verifier: SupabaseTokenVerifier = None):
        self._client_factory = client_factory or create_supabase_client
        self.auth = SupabaseAuthProvider(self._client_factory, verifier)
        logger.info("SupabaseStore initialized")

    async def execute(self, query: QueryBuilder) -> StoreResponse:
        try:
            client = await self._client_factory(query.access_token)
            builder = client.table(query.table)

            if query.operation == "insert":
                builder = builder.insert(query.payload)
            elif query.operation == "update":
                builder = builder.update(query.payload)
            elif query.operation == "delete":
                builder = builder.delete()
            else:
                builder = builder.select(query.columns)

            for column, op, value in query.filters:
                builder = builder.eq(column, value) if op == "eq" else builder.in_(column, value)

            for column, desc in query.ordering:
                builder = builder.order(column, desc=desc)

            result = await builder.execute()
        except Exception as e:
            message = _error_message(e)
            logger.error(f"Supabase {query.operation} on '{query.table}' failed: {message}")
            return StoreResponse(error=StoreError(message=message, code=getattr(e, "code", None)))

        data = result.data
        if query.single_row:
            data = data[0] if data else None
        return StoreResponse(data=data)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class SupabaseAuthProvider(AuthProvider):
    """
    Supabase Auth.  Bearer tokens are Supabase access tokens; the provider
    only remembers the session it opened itself, for get_session_user().
    """

    def __init__(self, client_factory: ClientFactory, verifier: SupabaseTokenVerifier = None):
        self._client_factory = client_factory
        self._verifier = verifier or SupabaseTokenVerifier()
        self._session: Optional[Session] = None

    def _open_session(self, response: Any) -> Session:
        sb_session = getattr(response, "session", None)
        session = Session(
            user=_to_user(response.user),
            access_token=getattr(sb_session, "access_token", None),
        )
        self._session = session
        return session

    async def get_session_user(self) -> Optional[User]:
        return self._session.user if self._session else None

    async def sign_in(self, email: str, password: str) -> Session:
        try:
            client = await self._client_factory(None)
            response = await client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            raise AuthError(_error_message(e)) from e
        if response.user is None:
            raise AuthError("Invalid login credentials")

        session = self._open_session(response)
        logger.info(f"User {session.user_id} logged in (supabase)")
        return session

    async def sign_up(self, name: str, email: str, password: str) -> Session:
        try:
            client = await self._client_factory(None)
            response = await client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": {"name": name}}}
            )
        except Exception as e:
            message = _error_message(e)
            if _is_conflict(message):
                raise ConflictError("User already exists") from e
            raise RemoteError(message) from e

        if response.user is None:
            raise RemoteError("Sign up failed. Please try again.")
        # With email confirmation on, an existing address comes back with no identities
        if getattr(response.user, "identities", None) == []:
            raise ConflictError("User already exists")

        # No session (and no token) until the email is confirmed
        session = self._open_session(response)
        logger.info(f"Registered user {session.user_id} (supabase)")
        return session

    async def sign_out(self) -> None:
        session, self._session = self._session, None
        if session is None or not session.access_token:
            return
        client = await self._client_factory(None)
        await client.auth.admin.sign_out(session.access_token, "local")

    async def resolve_token(self, token: str) -> User:
        claims = await self._verifier.verify(token)
        metadata = claims.get("user_metadata") or {}
        return User(
            id=str(claims["sub"]),
            name=metadata.get("name", ""),
            email=claims.get("email", "") or "",
        )

    async def update_user(self, session: Session, fields: Dict[str, Any]) -> User:
        if not session.access_token:
            raise AuthError("Not authenticated")

        attributes: Dict[str, Any] = {}
        if "email" in fields:
            attributes["email"] = fields["email"]
        if "password" in fields:
            attributes["password"] = fields["password"]
        if "name" in fields:
            attributes["data"] = {"name": fields["name"]}

        try:
            client = await self._client_factory(session.access_token)
            # Token only, no refresh: the client acts as this caller for this call alone
            await client.auth.set_session(session.access_token, "")
            response = await client.auth.update_user(attributes)
        except Exception as e:
            message = _error_message(e)
            if _is_conflict(message):
                raise ConflictError("Email is already in use") from e
            raise RemoteError(message) from e

        profile = {k: v for k, v in fields.items() if k != "password"}
        if response is None or response.user is None:
            return session.user.model_copy(update=profile)
        return _to_user(response.user)
