"""Backing store contract shared by the local and Supabase stores.

Repositories only ever talk to a ``BackingStore``: table access by name,
equality filters, single-row fetch, insert, update, delete and ordering,
all awaited through ``QueryBuilder.execute()``.  Store failures come back
as a ``StoreResponse`` carrying a ``StoreError`` rather than an exception,
so each repository decides whether a failure is fatal (write paths) or
degrades to an empty result (read paths).

Column names are always the snake_case backend names; a store that keeps
a different record shape translates at its own boundary.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from smartstudy.models.auth import Session, User


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


@dataclass
class StoreError:
    """Failure reported by a backing store"""
    message: str
    code: Optional[str] = None


@dataclass
class StoreResponse:
    """Either ``data`` or ``error`` is meaningful, never both"""
    data: Any = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def rows(self) -> List[Dict[str, Any]]:
        """Data as a list of rows, whatever shape the query returned"""
        if self.data is None:
            return []
        if isinstance(self.data, list):
            return self.data
        return [self.data]


# ---------------------------------------------------------------------------
# Query builder
# ---------------------------------------------------------------------------


class QueryBuilder:
    """Records one table operation; the owning store interprets it on execute().

    Mirrors the subset of the Supabase/PostgREST builder the repositories use::

        await store.table("notes").select().eq("user_id", uid).order("updated_at", desc=True).execute()
    """

    def __init__(self, store: "BackingStore", table: str, access_token: Optional[str] = None):
        self._store = store
        self.table = table
        self.access_token = access_token
        self.operation = "select"
        self.columns = "*"
        self.payload: Any = None
        self.filters: List[Tuple[str, str, Any]] = []
        self.ordering: List[Tuple[str, bool]] = []
        self.single_row = False

    def select(self, columns: str = "*") -> "QueryBuilder":
        self.operation = "select"
        self.columns = columns
        return self

    def insert(self, payload: Any) -> "QueryBuilder":
        """Insert one row (dict) or many (list of dicts)"""
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload: Dict[str, Any]) -> "QueryBuilder":
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self) -> "QueryBuilder":
        self.operation = "delete"
        return self

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        self.filters.append((column, "eq", value))
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "QueryBuilder":
        self.filters.append((column, "in", list(values)))
        return self

    def order(self, column: str, desc: bool = False) -> "QueryBuilder":
        self.ordering.append((column, desc))
        return self

    def single(self) -> "QueryBuilder":
        """Return the first matching row (or None) instead of a list"""
        self.single_row = True
        return self

    async def execute(self) -> StoreResponse:
        return await self._store.execute(self)


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


class AuthProvider(ABC):
    """Credential checks, bearer tokens and session persistence for one backing store.

    Providers raise the service error taxonomy (``AuthError``,
    ``ConflictError``, ``RemoteError``) directly; input validation is the
    caller's job.
    """

    @abstractmethod
    async def get_session_user(self) -> Optional[User]:
        """User of the persisted session, or None"""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Session:
        """Check credentials, persist the session, return it with its access token"""

    @abstractmethod
    async def sign_up(self, name: str, email: str, password: str) -> Session:
        """Register a user, persist the session, return it with its access token"""

    @abstractmethod
    async def sign_out(self) -> None:
        """Drop the persisted session"""

    @abstractmethod
    async def resolve_token(self, token: str) -> User:
        """User a bearer token was issued to; AuthError if the token is not valid"""

    @abstractmethod
    async def update_user(self, session: Session, fields: Dict[str, Any]) -> User:
        """Merge fields into the session user's record. A ``password`` field replaces the password."""


class BackingStore(ABC):
    """A table-like row store with an attached auth provider"""

    name = "base"
    auth: AuthProvider

    def table(self, name: str, session: Optional[Session] = None) -> QueryBuilder:
        """Query builder for a table, run on behalf of ``session`` when given"""
        return QueryBuilder(self, name, session.access_token if session else None)

    @abstractmethod
    async def execute(self, query: QueryBuilder) -> StoreResponse:
        """Run a recorded query; report failures in the response, never raise"""
