"""
Trivia questions via the Open Trivia Database (opentdb.com).
Free, no API key. The API reports failures in the body's response_code,
so an HTTP 200 can still be an error.
"""
from typing import Any, Dict, List, Optional

import httpx

from smartstudy.config import settings
from smartstudy.models.lookup import TriviaCategory, TriviaQuestion
from smartstudy.utils.errors import RemoteError, ValidationError
from smartstudy.utils.logger import get_logger

logger = get_logger(__name__)


class TriviaClient:
    """Fetch multiple choice and true/false questions."""

    FETCH_FAILED_MESSAGE = "Failed to fetch trivia questions. Please try again."

    RESPONSE_CODES = {
        1: "Not enough questions for this query. Try fewer questions or another category.",
        2: "Invalid trivia query parameters.",
        3: "Trivia session token not found.",
        4: "Trivia session token has returned all available questions.",
        5: "Too many trivia requests. Please wait a few seconds and try again.",
    }

    DIFFICULTIES = {"easy", "medium", "hard"}
    QUESTION_TYPES = {"multiple", "boolean"}

    def __init__(self, base_url: str = None, timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        self.base_url = (base_url or settings.TRIVIA_API_URL).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self._transport = transport

    async def _get(self, path: str, params: Dict[str, Any] = None) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": settings.HTTP_USER_AGENT},
            ) as client:
                resp = await client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"Trivia request {path} failed: {e}")
            raise RemoteError(self.FETCH_FAILED_MESSAGE) from e

        if not resp.is_success:
            logger.warning(f"Trivia API returned {resp.status_code} for {path}")
            raise RemoteError(self.FETCH_FAILED_MESSAGE)

        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"Trivia API returned invalid JSON for {path}: {e}")
            raise RemoteError(self.FETCH_FAILED_MESSAGE) from e

    async def fetch_questions(
        self,
        amount: int = 10,
        category: Optional[int] = None,
        difficulty: Optional[str] = None,
        question_type: Optional[str] = None,
    ) -> List[TriviaQuestion]:
        """
        Fetch ``amount`` questions in API order.

        Args:
            amount: 1 to settings.TRIVIA_MAX_QUESTIONS
            category: Category id from list_categories()
            difficulty: easy, medium or hard
            question_type: multiple or boolean

        Returns:
            Questions with decoded text; use TriviaQuestion.shuffled_options() to display them
        """
        if not 1 <= amount <= settings.TRIVIA_MAX_QUESTIONS:
            raise ValidationError(
                f"Number of questions must be between 1 and {settings.TRIVIA_MAX_QUESTIONS}"
            )
        if difficulty is not None and difficulty not in self.DIFFICULTIES:
            raise ValidationError(f"Difficulty must be one of: {', '.join(sorted(self.DIFFICULTIES))}")
        if question_type is not None and question_type not in self.QUESTION_TYPES:
            raise ValidationError(f"Question type must be one of: {', '.join(sorted(self.QUESTION_TYPES))}")

        params: Dict[str, Any] = {"amount": amount}
        if category is not None:
            params["category"] = category
        if difficulty is not None:
            params["difficulty"] = difficulty
        if question_type is not None:
            params["type"] = question_type

        data = await self._get("/api.php", params=params)

        code = data.get("response_code") if isinstance(data, dict) else None
        if code != 0:
            message = self.RESPONSE_CODES.get(code, self.FETCH_FAILED_MESSAGE)
            logger.warning(f"Trivia API response_code={code}: {message}")
            raise RemoteError(message)

        try:
            questions = [TriviaQuestion.model_validate(item) for item in data.get("results", [])]
        except ValueError as e:
            logger.error(f"Unexpected trivia payload: {e}")
            raise RemoteError(self.FETCH_FAILED_MESSAGE) from e

        logger.info(f"Fetched {len(questions)} trivia questions")
        return questions

    async def list_categories(self) -> List[TriviaCategory]:
        """All trivia categories the API offers"""
        data = await self._get("/api_category.php")
        try:
            return [TriviaCategory.model_validate(c) for c in data.get("trivia_categories", [])]
        except (AttributeError, ValueError) as e:
            logger.error(f"Unexpected trivia category payload: {e}")
            raise RemoteError(self.FETCH_FAILED_MESSAGE) from e
