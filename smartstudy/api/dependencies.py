"""
FastAPI dependencies wiring the services to the active backing store.
Tests override ``get_store`` and the client getters.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from smartstudy.db.base import BackingStore
from smartstudy.db.store import get_backing_store
from smartstudy.models.auth import Session
from smartstudy.services.auth_service import AuthService
from smartstudy.services.notes_service import NotesService
from smartstudy.services.quiz_service import QuizService
from smartstudy.utils.dictionary_client import DictionaryClient
from smartstudy.utils.trivia_client import TriviaClient


async def get_store() -> BackingStore:
    return await get_backing_store()


def get_auth_service(store: BackingStore = Depends(get_store)) -> AuthService:
    return AuthService(store)


def get_notes_service(store: BackingStore = Depends(get_store)) -> NotesService:
    return NotesService(store)


def get_quiz_service(store: BackingStore = Depends(get_store)) -> QuizService:
    return QuizService(store)


# Missing credentials mean "anonymous", not an error; routes decide what that allows
security = HTTPBearer(auto_error=False)


async def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[Session]:
    """
    Session of the caller's bearer token, or None when the request carries none.
    A token that fails verification is an AuthError (401).
    """
    if credentials is None:
        return None
    return await auth.session_for_token(credentials.credentials)


def get_dictionary_client() -> DictionaryClient:
    return DictionaryClient()


def get_trivia_client() -> TriviaClient:
    return TriviaClient()
