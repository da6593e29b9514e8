"""
Tests for TriviaClient against a mocked HTTP transport
"""
import httpx
import pytest

from smartstudy.models.lookup import TriviaQuestion
from smartstudy.utils.errors import RemoteError, ValidationError
from smartstudy.utils.trivia_client import TriviaClient

RESULTS = {
    "response_code": 0,
    "results": [
        {
            "type": "multiple",
            "difficulty": "easy",
            "category": "Science &amp; Nature",
            "question": "What is the chemical symbol for &quot;gold&quot;?",
            "correct_answer": "Au",
            "incorrect_answers": ["Ag", "Gd", "G&ouml;"],
        },
        {
            "type": "boolean",
            "difficulty": "medium",
            "category": "History",
            "question": "The Great Wall is visible from space.",
            "correct_answer": "False",
            "incorrect_answers": ["True"],
        },
    ],
}


class Recorder:
    """Mock transport handler that remembers query params"""

    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return httpx.Response(self.status, json=self.payload)


def _client(handler):
    return TriviaClient(transport=httpx.MockTransport(handler))


async def test_fetch_sends_only_set_params():
    recorder = Recorder(RESULTS)

    await _client(recorder).fetch_questions(amount=5)

    [request] = recorder.requests
    assert request.url.path == "/api.php"
    assert dict(request.url.params) == {"amount": "5"}


async def test_fetch_sends_filters():
    recorder = Recorder(RESULTS)

    await _client(recorder).fetch_questions(amount=2, category=17, difficulty="easy", question_type="multiple")

    params = dict(recorder.requests[0].url.params)
    assert params == {"amount": "2", "category": "17", "difficulty": "easy", "type": "multiple"}


async def test_fetch_decodes_html_entities():
    questions = await _client(Recorder(RESULTS)).fetch_questions()

    first, second = questions
    assert first.category == "Science & Nature"
    assert first.question == 'What is the chemical symbol for "gold"?'
    assert first.incorrect_answers == ["Ag", "Gd", "Gö"]
    assert first.question_type == "multiple"
    assert second.question_type == "boolean"


async def test_response_code_is_an_error_even_on_http_200():
    client = _client(Recorder({"response_code": 1, "results": []}))
    with pytest.raises(RemoteError, match="Not enough questions"):
        await client.fetch_questions(amount=50)


async def test_unknown_response_code():
    client = _client(Recorder({"response_code": 99}))
    with pytest.raises(RemoteError, match="Failed to fetch trivia"):
        await client.fetch_questions()


async def test_http_failure():
    client = _client(Recorder({}, status=503))
    with pytest.raises(RemoteError):
        await client.fetch_questions()


@pytest.mark.parametrize("kwargs", [
    {"amount": 0},
    {"amount": 51},
    {"difficulty": "impossible"},
    {"question_type": "essay"},
])
async def test_invalid_arguments_make_no_request(kwargs):
    recorder = Recorder(RESULTS)
    with pytest.raises(ValidationError):
        await _client(recorder).fetch_questions(**kwargs)
    assert recorder.requests == []


async def test_list_categories():
    recorder = Recorder({"trivia_categories": [{"id": 9, "name": "General Knowledge"}]})

    categories = await _client(recorder).list_categories()

    assert recorder.requests[0].url.path == "/api_category.php"
    assert [(c.id, c.name) for c in categories] == [(9, "General Knowledge")]


def test_shuffled_options_keeps_every_answer():
    question = TriviaQuestion.model_validate(RESULTS["results"][0])

    for _ in range(20):
        options = question.shuffled_options()
        assert sorted(options) == sorted(["Au", "Ag", "Gd", "Gö"])

    # Order on the model itself is untouched
    assert question.correct_answer == "Au"
    assert question.incorrect_answers == ["Ag", "Gd", "Gö"]
