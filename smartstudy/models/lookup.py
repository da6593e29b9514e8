"""
Data models for the external lookup APIs (dictionary and trivia)
"""
import html
import random
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List


# =============================================================================
# Dictionary (dictionaryapi.dev)
# =============================================================================

class _DictionaryModel(BaseModel):
    """The dictionary API speaks camelCase"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Phonetic(_DictionaryModel):
    """One phonetic transcription, optionally with a pronunciation clip"""
    text: Optional[str] = None
    audio: Optional[str] = None


class Definition(_DictionaryModel):
    """A single sense of a word"""
    definition: str
    example: Optional[str] = None
    synonyms: List[str] = Field(default_factory=list)
    antonyms: List[str] = Field(default_factory=list)


class Meaning(_DictionaryModel):
    """Definitions grouped under one part of speech"""
    part_of_speech: str
    definitions: List[Definition] = Field(default_factory=list)


class DictionaryEntry(_DictionaryModel):
    """One dictionary entry as returned by the definitions endpoint"""
    word: str
    phonetic: Optional[str] = None
    phonetics: List[Phonetic] = Field(default_factory=list)
    meanings: List[Meaning] = Field(default_factory=list)
    source_urls: List[str] = Field(default_factory=list)

    def audio_url(self) -> Optional[str]:
        """First non-empty pronunciation audio URL, if any"""
        for phonetic in self.phonetics:
            if phonetic.audio:
                return phonetic.audio
        return None


class DictionaryResponse(BaseModel):
    """Response for a word lookup"""
    success: bool
    word: str
    entries: List[DictionaryEntry]
    message: str


# =============================================================================
# Trivia (Open Trivia Database)
# =============================================================================

class TriviaQuestion(BaseModel):
    """A fetched trivia question. Text arrives HTML-encoded and is decoded here."""
    model_config = ConfigDict(populate_by_name=True)

    category: str = Field(default="")
    question_type: str = Field(default="multiple", alias="type")
    difficulty: str = Field(default="")
    question: str
    correct_answer: str
    incorrect_answers: List[str] = Field(default_factory=list)

    @field_validator("category", "question", "correct_answer", mode="before")
    @classmethod
    def _unescape(cls, value):
        return html.unescape(value) if isinstance(value, str) else value

    @field_validator("incorrect_answers", mode="before")
    @classmethod
    def _unescape_all(cls, value):
        if isinstance(value, list):
            return [html.unescape(v) if isinstance(v, str) else v for v in value]
        return value

    def shuffled_options(self) -> List[str]:
        """
        All answers in random order, for display only.
        Not seeded and never persisted; score against correct_answer, not position.
        """
        options = [self.correct_answer, *self.incorrect_answers]
        return random.sample(options, len(options))


class TriviaCategory(BaseModel):
    """A trivia category id and its label"""
    id: int
    name: str


class TriviaQuestionsResponse(BaseModel):
    """Response for a trivia fetch"""
    success: bool
    questions: List[TriviaQuestion]
    total_count: int


class TriviaCategoriesResponse(BaseModel):
    """Response listing trivia categories"""
    success: bool
    categories: List[TriviaCategory]
