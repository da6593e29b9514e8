"""
Word definitions via the free Dictionary API (dictionaryapi.dev).
No API key, no caching, no retries: one request per lookup.
"""
from typing import List
from urllib.parse import quote

import httpx

from smartstudy.config import settings
from smartstudy.models.lookup import DictionaryEntry
from smartstudy.utils.errors import NotFoundError, RemoteError, ValidationError
from smartstudy.utils.logger import get_logger

logger = get_logger(__name__)


class DictionaryClient:
    """Look up English word definitions."""

    NOT_FOUND_MESSAGE = "Word not found. Please check the spelling and try again."
    FETCH_FAILED_MESSAGE = "Failed to fetch definition. Please try again."

    def __init__(self, base_url: str = None, timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        self.base_url = (base_url or settings.DICTIONARY_API_URL).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self._transport = transport

    @staticmethod
    def normalize(word: str) -> str:
        """The term actually looked up for ``word``"""
        return (word or "").strip()

    async def lookup(self, word: str) -> List[DictionaryEntry]:
        """
        Fetch all entries for a word.

        Raises:
            ValidationError: empty word
            NotFoundError: the API has no entry for the word (HTTP 404)
            RemoteError: any other failure, including network errors
        """
        term = self.normalize(word)
        if not term:
            raise ValidationError("Please enter a word")

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": settings.HTTP_USER_AGENT},
            ) as client:
                resp = await client.get(f"/entries/en/{quote(term, safe='')}")
        except httpx.HTTPError as e:
            logger.warning(f"Dictionary request for '{term}' failed: {e}")
            raise RemoteError(self.FETCH_FAILED_MESSAGE) from e

        if resp.status_code == 404:
            logger.info(f"No dictionary entry for '{term}'")
            raise NotFoundError(self.NOT_FOUND_MESSAGE)
        if not resp.is_success:
            logger.warning(f"Dictionary API returned {resp.status_code} for '{term}'")
            raise RemoteError(self.FETCH_FAILED_MESSAGE)

        try:
            entries = [DictionaryEntry.model_validate(item) for item in resp.json()]
        except (ValueError, TypeError) as e:
            logger.error(f"Unexpected dictionary payload for '{term}': {e}")
            raise RemoteError(self.FETCH_FAILED_MESSAGE) from e

        logger.info(f"Dictionary returned {len(entries)} entries for '{term}'")
        return entries
