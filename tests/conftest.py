"""
Shared fixtures for SmartStudy tests
"""
import os
import tempfile

# Settings are read at import time; keep test runs out of the user's home
os.environ.setdefault("SMARTSTUDY_HOME", tempfile.mkdtemp(prefix="smartstudy-tests-"))
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")

import pytest

from smartstudy.db.base import AuthProvider, BackingStore, StoreError, StoreResponse
from smartstudy.db.local_storage import MemoryStorage
from smartstudy.db.local_store import LocalStore
from smartstudy.services.auth_service import AuthService
from smartstudy.services.notes_service import NotesService
from smartstudy.services.quiz_service import QuizService
from smartstudy.utils.errors import RemoteError


class FailingAuthProvider(AuthProvider):
    """Auth provider whose backend is unreachable"""

    async def get_session_user(self):
        raise RemoteError("auth backend unreachable")

    async def sign_in(self, email, password):
        raise RemoteError("auth backend unreachable")

    async def sign_up(self, name, email, password):
        raise RemoteError("auth backend unreachable")

    async def sign_out(self):
        raise RemoteError("auth backend unreachable")

    async def resolve_token(self, token):
        raise RemoteError("auth backend unreachable")

    async def update_user(self, session, fields):
        raise RemoteError("auth backend unreachable")


class FailingStore(BackingStore):
    """Backing store that reports an error for every query"""

    name = "failing"

    def __init__(self):
        self.auth = FailingAuthProvider()
        self.queries = []

    async def execute(self, query):
        self.queries.append(query)
        return StoreResponse(error=StoreError(message="store unavailable"))


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return LocalStore(storage)


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def auth(store):
    return AuthService(store)


@pytest.fixture
def notes(store):
    return NotesService(store)


@pytest.fixture
def quizzes(store):
    return QuizService(store)


@pytest.fixture
async def session(auth):
    return await auth.register("Ada Lovelace", "ada@example.com", "secret1", "secret1")


@pytest.fixture
async def other_session(auth):
    return await auth.register("Bob Byte", "bob@example.com", "secret2", "secret2")
