"""Local backing store over key/value blobs.

Each table lives under one key (``<prefix>_<table>``) as a JSON array of
camelCase records; the current session lives under ``<prefix>_auth``.
With the default prefix that gives the layout::

    smartstudy_auth           current-session user record
    smartstudy_users          all users (with password hashes)
    smartstudy_notes          all notes
    smartstudy_quizzes        all quizzes
    smartstudy_quiz_results   all quiz results

Every query loads the whole table, filters it in Python and, for writes,
saves it back.  There is no transaction around that read-modify-write.
"""

import json
from typing import Any, Dict, List, Optional

from smartstudy.config import settings
from smartstudy.db.base import (
    AuthProvider,
    BackingStore,
    QueryBuilder,
    StoreError,
    StoreResponse,
)
from smartstudy.db.local_storage import JSONFileStorage, KeyValueStorage
from smartstudy.db.mapping import from_local_record, to_local_record
from smartstudy.models.auth import Session, User
from smartstudy.models.common import new_id
from smartstudy.utils.errors import AuthError, ConflictError, RemoteError
from smartstudy.utils.logger import get_logger
from smartstudy.utils.security import hash_password, verify_password
from smartstudy.utils.tokens import issue_token, verify_local_token

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _matches(row: Dict[str, Any], filters) -> bool:
    for column, op, value in filters:
        if op == "eq" and row.get(column) != value:
            return False
        if op == "in" and row.get(column) not in value:
            return False
    return True


def _sort_key(value: Any):
    # None sorts before any real value
    return (value is not None, value if value is not None else "")


def _project(row: Dict[str, Any], columns: str) -> Dict[str, Any]:
    if columns.strip() == "*":
        return dict(row)
    wanted = [c.strip() for c in columns.split(",") if c.strip()]
    return {c: row.get(c) for c in wanted}


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class LocalStore(BackingStore):
    """
    Backing store over a KeyValueStorage (JSON files on disk, or memory).
    """

    name = "local"

    def __init__(self, storage: KeyValueStorage = None, prefix: str = None):
        """
        Initialize the local store.

        Args:
            storage: Blob storage. Uses a JSONFileStorage at settings.LOCAL_STORAGE_DIR if not provided.
            prefix: Key prefix. Uses settings.LOCAL_STORAGE_PREFIX if not provided.
        """
        self.storage = storage if storage is not None else JSONFileStorage()
        self.prefix = prefix or settings.LOCAL_STORAGE_PREFIX
        self.auth = LocalAuthProvider(self)
        logger.info(f"LocalStore initialized ({type(self.storage).__name__}, prefix={self.prefix})")

    @property
    def session_key(self) -> str:
        return f"{self.prefix}_auth"

    def key_for(self, table: str) -> str:
        return f"{self.prefix}_{table}"

    def load_rows(self, table: str) -> List[Dict[str, Any]]:
        """Load a table as column-named rows; unreadable blobs count as empty"""
        raw = self.storage.get_item(self.key_for(table))
        if not raw:
            return []
        try:
            records = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable {self.key_for(table)} blob: {e}")
            return []
        if not isinstance(records, list):
            logger.warning(f"Discarding non-list {self.key_for(table)} blob")
            return []
        return from_local_record(records)

    def save_rows(self, table: str, rows: List[Dict[str, Any]]):
        self.storage.set_item(self.key_for(table), json.dumps(to_local_record(rows), default=str))

    async def execute(self, query: QueryBuilder) -> StoreResponse:
        try:
            data = self._run(query)
        except Exception as e:
            logger.error(f"Local {query.operation} on '{query.table}' failed: {e}")
            return StoreResponse(error=StoreError(message=str(e)))
        return StoreResponse(data=data)

    def _run(self, query: QueryBuilder) -> Any:
        rows = self.load_rows(query.table)

        if query.operation == "insert":
            payload = query.payload if isinstance(query.payload, list) else [query.payload]
            inserted = []
            for item in payload:
                row = dict(item)
                row.setdefault("id", new_id())
                inserted.append(row)
            self.save_rows(query.table, rows + inserted)
            result = inserted

        elif query.operation == "update":
            result = []
            for row in rows:
                if _matches(row, query.filters):
                    row.update(query.payload)
                    result.append(dict(row))
            if result:
                self.save_rows(query.table, rows)

        elif query.operation == "delete":
            kept, result = [], []
            for row in rows:
                (result if _matches(row, query.filters) else kept).append(row)
            if result:
                self.save_rows(query.table, kept)

        else:
            result = [r for r in rows if _matches(r, query.filters)]
            # Apply the last ordering first so earlier ones take precedence
            for column, desc in reversed(query.ordering):
                result.sort(key=lambda r: _sort_key(r.get(column)), reverse=desc)
            result = [_project(r, query.columns) for r in result]

        if query.single_row:
            return result[0] if result else None
        return result


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LocalAuthProvider(AuthProvider):
    """
    Users table plus a persisted session blob, all inside a LocalStore.
    Sessions handed out by sign_in/sign_up carry a signed bearer token;
    resolve_token re-reads the user, so profile edits show up on the next request.
    """

    USERS_TABLE = "users"

    def __init__(self, store: LocalStore):
        self._store = store

    def _persist_session(self, user: User):
        self._store.storage.set_item(
            self._store.session_key, json.dumps(to_local_record(user.model_dump()))
        )

    async def _find_one(self, column: str, value: Any) -> Optional[Dict[str, Any]]:
        response = await (
            self._store.table(self.USERS_TABLE).select().eq(column, value).single().execute()
        )
        if not response.ok:
            raise RemoteError(response.error.message)
        return response.data

    async def get_session_user(self) -> Optional[User]:
        raw = self._store.storage.get_item(self._store.session_key)
        if not raw:
            return None
        try:
            return User.model_validate(from_local_record(json.loads(raw)))
        except ValueError as e:
            logger.warning(f"Ignoring unreadable session record: {e}")
            return None

    async def sign_in(self, email: str, password: str) -> Session:
        row = await self._find_one("email", email)
        if row is None:
            raise AuthError("User not found")
        if not verify_password(password, row.get("password_hash") or ""):
            raise AuthError("Invalid password")

        user = User.model_validate(row)
        self._persist_session(user)
        logger.info(f"User {user.id} logged in (local)")
        return Session(user=user, access_token=issue_token(user))

    async def sign_up(self, name: str, email: str, password: str) -> Session:
        if await self._find_one("email", email) is not None:
            raise ConflictError("User already exists")

        user = User(name=name, email=email)
        row = {**user.model_dump(), "password_hash": hash_password(password)}
        response = await self._store.table(self.USERS_TABLE).insert(row).execute()
        if not response.ok:
            raise RemoteError(response.error.message)

        self._persist_session(user)
        logger.info(f"Registered user {user.id} (local)")
        return Session(user=user, access_token=issue_token(user))

    async def sign_out(self) -> None:
        self._store.storage.remove_item(self._store.session_key)

    async def resolve_token(self, token: str) -> User:
        claims = verify_local_token(token)
        row = await self._find_one("id", claims["sub"])
        if row is None:
            raise AuthError("User not found")
        return User.model_validate(row)

    async def update_user(self, session: Session, fields: Dict[str, Any]) -> User:
        user = session.user
        fields = dict(fields)
        password = fields.pop("password", None)
        changes = dict(fields)
        if password is not None:
            changes["password_hash"] = hash_password(password)

        new_email = fields.get("email")
        if new_email and new_email != user.email:
            existing = await self._find_one("email", new_email)
            if existing is not None and existing["id"] != user.id:
                raise ConflictError("Email is already in use")

        response = await (
            self._store.table(self.USERS_TABLE).update(changes).eq("id", user.id).execute()
        )
        if not response.ok:
            raise RemoteError(response.error.message)

        updated = user.model_copy(update=fields)
        current = await self.get_session_user()
        if current is not None and current.id == user.id:
            self._persist_session(updated)
        return updated
