"""
End-to-end tests for the SmartStudy API over an in-memory store
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from smartstudy.api.app import app
from smartstudy.api.dependencies import get_dictionary_client, get_store, get_trivia_client
from smartstudy.db.local_storage import MemoryStorage
from smartstudy.db.local_store import LocalStore
from smartstudy.utils.dictionary_client import DictionaryClient
from smartstudy.utils.trivia_client import TriviaClient

API = "/api/v1"


def _dictionary_handler(request):
    if request.url.path.endswith("/hello"):
        return httpx.Response(200, json=[{
            "word": "hello",
            "phonetics": [{"text": "həˈləʊ", "audio": "https://example.com/hello.mp3"}],
            "meanings": [{"partOfSpeech": "noun", "definitions": [{"definition": "a greeting"}]}],
        }])
    if request.url.path.endswith("/offline"):
        return httpx.Response(500)
    return httpx.Response(404, json={"title": "No Definitions Found"})


def _trivia_handler(request):
    if request.url.path == "/api_category.php":
        return httpx.Response(200, json={"trivia_categories": [{"id": 9, "name": "General Knowledge"}]})
    return httpx.Response(200, json={
        "response_code": 0,
        "results": [{
            "type": "boolean",
            "difficulty": "easy",
            "category": "Science",
            "question": "Water boils at 100&deg;C at sea level.",
            "correct_answer": "True",
            "incorrect_answers": ["False"],
        }],
    })


@pytest.fixture
def client():
    store = LocalStore(MemoryStorage())
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_dictionary_client] = lambda: DictionaryClient(
        transport=httpx.MockTransport(_dictionary_handler)
    )
    app.dependency_overrides[get_trivia_client] = lambda: TriviaClient(
        transport=httpx.MockTransport(_trivia_handler)
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def _signup(client, name="Ada", email="ada@example.com", password="secret1"):
    return client.post(f"{API}/auth/signup", json={
        "name": name, "email": email, "password": password, "confirm_password": password,
    })


def _bearer(response):
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def ada(client):
    return _bearer(_signup(client))


def test_health(client):
    response = client.get(f"{API}/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_signup_login_logout(client):
    response = _signup(client)
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "ada@example.com"
    assert body["token_type"] == "bearer" and body["access_token"]

    assert client.get(f"{API}/auth/me", headers=_bearer(response)).json()["success"] is True

    assert client.post(f"{API}/auth/logout").json() == {"success": True, "message": "Logged out"}
    me = client.get(f"{API}/auth/me").json()
    assert me["success"] is False and me["user"] is None

    response = client.post(f"{API}/auth/login", json={"email": "ada@example.com", "password": "secret1"})
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Ada"
    assert client.get(f"{API}/auth/me", headers=_bearer(response)).json()["user"]["name"] == "Ada"


def test_auth_error_statuses(client):
    assert _signup(client, password="12345").status_code == 400
    assert _signup(client).status_code == 200
    assert _signup(client).status_code == 409

    response = client.post(f"{API}/auth/login", json={"email": "ada@example.com", "password": "wrong!"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid password"}


def test_other_clients_never_see_the_last_login(client, ada):
    client.post(f"{API}/notes", json={"title": "Ada's secret", "content": "Private"}, headers=ada)

    stranger = TestClient(app)
    assert stranger.get(f"{API}/notes").json()["notes"] == []
    assert stranger.get(f"{API}/quizzes").json()["quizzes"] == []
    assert stranger.get(f"{API}/auth/me").json()["success"] is False
    assert stranger.post(f"{API}/notes", json={"title": "x"}).status_code == 401
    assert stranger.patch(f"{API}/auth/me", json={"name": "Mallory"}).status_code == 401

    forged = {"Authorization": "Bearer not-a-real-token"}
    assert stranger.get(f"{API}/notes", headers=forged).status_code == 401
    assert stranger.get(f"{API}/auth/me", headers=forged).status_code == 401

    bob = _bearer(_signup(stranger, name="Bob", email="bob@example.com"))
    assert stranger.get(f"{API}/notes", headers=bob).json()["notes"] == []
    titles = [n["title"] for n in client.get(f"{API}/notes", headers=ada).json()["notes"]]
    assert titles == ["Ada's secret"]


def test_profile_update(client, ada):
    response = client.patch(f"{API}/auth/me", json={"name": "Ada King"}, headers=ada)
    assert response.status_code == 200
    assert client.get(f"{API}/auth/me", headers=ada).json()["user"]["name"] == "Ada King"


def test_change_password(client, ada):
    response = client.put(f"{API}/auth/password", json={
        "new_password": "better1", "confirm_password": "better1",
    }, headers=ada)
    assert response.json() == {"success": True, "message": "Password updated"}

    assert client.post(f"{API}/auth/login", json={"email": "ada@example.com", "password": "secret1"}).status_code == 401
    assert client.post(f"{API}/auth/login", json={"email": "ada@example.com", "password": "better1"}).status_code == 200


def test_change_password_errors(client, ada):
    mismatch = client.put(f"{API}/auth/password", json={
        "new_password": "better1", "confirm_password": "better2",
    }, headers=ada)
    assert mismatch.status_code == 400
    assert mismatch.json()["error"] == "Passwords do not match"

    short = client.put(f"{API}/auth/password", json={"new_password": "abc", "confirm_password": "abc"}, headers=ada)
    assert short.status_code == 400

    anonymous = client.put(f"{API}/auth/password", json={"new_password": "better1", "confirm_password": "better1"})
    assert anonymous.status_code == 401


def test_notes_flow(client, ada):
    created = client.post(f"{API}/notes", json={"title": "Cells", "content": "Mitochondria"}, headers=ada).json()["note"]
    note_id = created["id"]

    listed = client.get(f"{API}/notes", headers=ada).json()
    assert listed["total_count"] == 1

    updated = client.patch(f"{API}/notes/{note_id}", json={"content": "Powerhouse"}, headers=ada).json()["note"]
    assert updated["title"] == "Cells"
    assert updated["content"] == "Powerhouse"

    assert client.get(f"{API}/notes/{note_id}", headers=ada).json()["note"]["content"] == "Powerhouse"

    assert client.delete(f"{API}/notes/{note_id}", headers=ada).status_code == 200
    assert client.get(f"{API}/notes/{note_id}", headers=ada).status_code == 404


def test_note_search(client, ada):
    client.post(f"{API}/notes", json={"title": "Cells", "content": "Mitochondria"}, headers=ada)
    client.post(f"{API}/notes", json={"title": "Physics", "content": "Newton's laws"}, headers=ada)

    found = client.get(f"{API}/notes", params={"query": "mito"}, headers=ada).json()
    assert [n["title"] for n in found["notes"]] == ["Cells"]
    assert found["total_count"] == 1

    assert client.get(f"{API}/notes", params={"query": "PHYS"}, headers=ada).json()["total_count"] == 1
    assert client.get(f"{API}/notes", params={"query": "chemistry"}, headers=ada).json()["notes"] == []
    assert client.get(f"{API}/notes", headers=ada).json()["total_count"] == 2


def test_notes_require_login(client):
    assert client.get(f"{API}/notes").json()["notes"] == []
    response = client.post(f"{API}/notes", json={"title": "x"})
    assert response.status_code == 401
    assert response.json()["error"] == "Not authenticated"


def test_update_missing_note(client, ada):
    assert client.patch(f"{API}/notes/nope", json={"title": "x"}, headers=ada).status_code == 404


def test_quiz_flow(client, ada):
    # First listing seeds the sample quiz
    quizzes = client.get(f"{API}/quizzes", headers=ada).json()["quizzes"]
    assert [q["title"] for q in quizzes] == ["Basic Mathematics"]
    assert client.post(f"{API}/quizzes/sample", headers=ada).json()["quiz"] is None

    quiz = client.post(f"{API}/quizzes", json={
        "title": "Capitals",
        "questions": [
            {"question": "France?", "options": ["Paris", "Rome"], "correct_answer": 0},
            {"question": "Italy?", "options": ["Paris", "Rome"], "correct_answer": 1},
        ],
    }, headers=ada).json()["quiz"]
    assert quiz["questions"][1]["id"] == f"{quiz['id']}_1"

    result = client.post(
        f"{API}/quizzes/{quiz['id']}/submit", json={"answers": [0, 0]}, headers=ada
    ).json()["result"]
    assert (result["score"], result["total_questions"], result["percentage"]) == (1, 2, 50)

    results = client.get(f"{API}/quizzes/results", params={"quiz_id": quiz["id"]}, headers=ada).json()
    assert results["total_count"] == 1

    assert client.get(f"{API}/quizzes/{quiz['id']}", headers=ada).status_code == 200
    client.delete(f"{API}/quizzes/{quiz['id']}", headers=ada)
    assert client.get(f"{API}/quizzes/{quiz['id']}", headers=ada).status_code == 404


def test_invalid_quiz_is_rejected(client, ada):
    response = client.post(f"{API}/quizzes", json={
        "title": "Broken",
        "questions": [{"question": "?", "options": ["a"], "correct_answer": 3}],
    }, headers=ada)
    assert response.status_code == 422


def test_submit_to_unknown_quiz(client, ada):
    response = client.post(f"{API}/quizzes/missing/submit", json={"answers": []}, headers=ada)
    assert response.status_code == 404
    assert response.json()["error"] == "Quiz not found"


def test_dictionary_lookup(client):
    response = client.get(f"{API}/dictionary/hello")
    assert response.status_code == 200
    entry = response.json()["entries"][0]
    assert entry["meanings"][0]["partOfSpeech"] == "noun"

    assert client.get(f"{API}/dictionary/qwzxv").status_code == 404
    assert client.get(f"{API}/dictionary/offline").status_code == 502


def test_dictionary_echoes_the_looked_up_term(client):
    response = client.get(f"{API}/dictionary/%20hello%20")
    assert response.status_code == 200
    assert response.json()["word"] == "hello"
    assert response.json()["message"] == 'Found definition for "hello"'


def test_trivia(client):
    response = client.get(f"{API}/trivia/questions", params={"amount": 1})
    assert response.status_code == 200
    question = response.json()["questions"][0]
    assert question["type"] == "boolean"
    assert question["question"] == "Water boils at 100°C at sea level."

    assert client.get(f"{API}/trivia/questions", params={"amount": 0}).status_code == 400
    assert client.get(f"{API}/trivia/categories").json()["categories"] == [{"id": 9, "name": "General Knowledge"}]
