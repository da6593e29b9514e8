"""
Quiz data models for SmartStudy
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List

from smartstudy.models.common import new_id, utc_timestamp


class QuizQuestionInput(BaseModel):
    """A multiple choice question as authored, before it gets an id"""
    question: str = Field(..., description="The question text")
    options: List[str] = Field(..., min_length=1, description="Answer options, in display order")
    correct_answer: int = Field(..., description="Index of the correct option")

    @model_validator(mode="after")
    def check_correct_answer(self):
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(
                f"correct_answer {self.correct_answer} is not a valid index "
                f"into {len(self.options)} options"
            )
        return self


class QuizQuestion(QuizQuestionInput):
    """Single stored quiz question"""
    id: str = Field(..., description="Question id, unique within its quiz")

    def check_answer(self, selected: Optional[int]) -> bool:
        """Check if the selected option index is the correct one"""
        return selected == self.correct_answer


class Quiz(BaseModel):
    """A quiz owned by one user"""
    id: str = Field(default_factory=new_id)
    title: str = Field(..., description="Quiz title")
    description: str = Field(default="")
    questions: List[QuizQuestion] = Field(default_factory=list)
    user_id: str = Field(..., description="Owner id")
    created_at: str = Field(default_factory=utc_timestamp)
    updated_at: str = Field(default_factory=utc_timestamp)


class QuizResult(BaseModel):
    """
    Outcome of one submitted attempt. Immutable once stored.
    total_questions and percentage are frozen at submission time.
    """
    id: str = Field(default_factory=new_id)
    quiz_id: str
    user_id: Optional[str] = Field(default=None, description="Submitter, informational only")
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)
    answers: List[Optional[int]] = Field(default_factory=list)
    completed_at: str = Field(default_factory=utc_timestamp)


# API Request/Response models
class CreateQuizRequest(BaseModel):
    """Request to create a quiz"""
    title: str = Field(..., description="Quiz title")
    description: str = Field(default="")
    questions: List[QuizQuestionInput] = Field(default_factory=list)


class SubmitQuizRequest(BaseModel):
    """Selected option index per question, index-aligned with the quiz"""
    answers: List[Optional[int]] = Field(default_factory=list)


class QuizResponse(BaseModel):
    """Response wrapping a single quiz"""
    success: bool
    quiz: Optional[Quiz] = None
    message: str


class ListQuizzesResponse(BaseModel):
    """Response listing all quizzes"""
    success: bool
    quizzes: List[Quiz]
    total_count: int


class SubmitQuizResponse(BaseModel):
    """Response after submitting a quiz"""
    success: bool
    result: QuizResult
    message: str


class ListResultsResponse(BaseModel):
    """Response listing quiz results"""
    success: bool
    results: List[QuizResult]
    total_count: int
