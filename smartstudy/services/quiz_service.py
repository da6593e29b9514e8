"""
Quiz repository for SmartStudy.

Quizzes are scoped to their owner like notes.  Results are owned
transitively: a result is visible to whoever owns the quiz it references.
Each result stores its own total_questions and percentage, frozen at
submission time.
"""
import math
from typing import List, Optional, Sequence

from smartstudy.db.base import BackingStore
from smartstudy.models.auth import Session
from smartstudy.models.common import new_id
from smartstudy.models.quiz import (
    CreateQuizRequest,
    Quiz,
    QuizQuestion,
    QuizQuestionInput,
    QuizResult,
)
from smartstudy.utils.errors import AuthError, NotFoundError, RemoteError, ValidationError
from smartstudy.utils.logger import get_logger

logger = get_logger(__name__)


SAMPLE_QUIZ = CreateQuizRequest(
    title="Basic Mathematics",
    description="Test your basic math skills",
    questions=[
        QuizQuestionInput(question="What is 2 + 2?", options=["3", "4", "5", "6"], correct_answer=1),
        QuizQuestionInput(question="What is 10 × 5?", options=["45", "50", "55", "60"], correct_answer=1),
        QuizQuestionInput(question="What is 15 ÷ 3?", options=["4", "5", "6", "7"], correct_answer=1),
    ],
)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def score_answers(questions: Sequence[QuizQuestion], answers: Sequence[Optional[int]]) -> int:
    """
    Count answers matching their question's correct option, pairwise by index.
    Extra answers, and questions left without an answer, score nothing.
    """
    return sum(1 for question, answer in zip(questions, answers) if question.check_answer(answer))


def percentage(score: int, total: int) -> int:
    """score/total as a whole percentage, halves rounded up; 0 for an empty quiz"""
    if total <= 0:
        return 0
    return int(math.floor(score * 100 / total + 0.5))


def _require_session(session: Optional[Session]) -> Session:
    if session is None:
        raise AuthError("Not authenticated")
    return session


class QuizService:
    """User-scoped CRUD over quizzes, plus scoring and results"""

    TABLE = "quizzes"
    RESULTS_TABLE = "quiz_results"

    def __init__(self, store: BackingStore):
        self.store = store

    # ------------------------------------------------------------------
    # Quiz CRUD
    # ------------------------------------------------------------------

    async def list_quizzes(self, session: Optional[Session]) -> List[Quiz]:
        """All of the user's quizzes, newest first"""
        if session is None:
            return []

        response = await (
            self.store.table(self.TABLE, session)
            .select()
            .eq("user_id", session.user_id)
            .order("created_at", desc=True)
            .execute()
        )
        if not response.ok:
            logger.error(f"Error listing quizzes for user {session.user_id}: {response.error.message}")
            return []

        return [Quiz.model_validate(row) for row in response.rows]

    async def _fetch_quiz(self, session: Session, quiz_id: str) -> Optional[Quiz]:
        """Owned quiz or None; store failures raise RemoteError"""
        response = await (
            self.store.table(self.TABLE, session)
            .select()
            .eq("id", quiz_id)
            .eq("user_id", session.user_id)
            .single()
            .execute()
        )
        if not response.ok:
            raise RemoteError(response.error.message)
        if response.data is None:
            return None
        return Quiz.model_validate(response.data)

    async def get_quiz(self, session: Optional[Session], quiz_id: str) -> Optional[Quiz]:
        """The quiz if it exists and belongs to the user, else None"""
        if session is None:
            return None
        try:
            return await self._fetch_quiz(session, quiz_id)
        except RemoteError as e:
            logger.error(f"Error loading quiz {quiz_id}: {e.message}")
            return None

    async def create_quiz(self, session: Optional[Session], data: CreateQuizRequest) -> Quiz:
        session = _require_session(session)
        if not data.title.strip():
            raise ValidationError("Quiz title is required")

        quiz_id = new_id()
        questions = [
            QuizQuestion(id=f"{quiz_id}_{idx}", **q.model_dump())
            for idx, q in enumerate(data.questions)
        ]
        quiz = Quiz(
            id=quiz_id,
            title=data.title,
            description=data.description,
            questions=questions,
            user_id=session.user_id,
        )

        response = await self.store.table(self.TABLE, session).insert(quiz.model_dump()).execute()
        if not response.ok:
            logger.error(f"Error creating quiz: {response.error.message}")
            raise RemoteError(response.error.message)

        logger.info(f"Created quiz {quiz.id} ({len(questions)} questions) for user {session.user_id}")
        return Quiz.model_validate(response.rows[0]) if response.rows else quiz

    async def delete_quiz(self, session: Optional[Session], quiz_id: str) -> None:
        """Delete the quiz if the user owns it; otherwise do nothing"""
        session = _require_session(session)

        response = await (
            self.store.table(self.TABLE, session)
            .delete()
            .eq("id", quiz_id)
            .eq("user_id", session.user_id)
            .execute()
        )
        if not response.ok:
            logger.error(f"Error deleting quiz {quiz_id}: {response.error.message}")
            raise RemoteError(response.error.message)

        if response.rows:
            logger.info(f"Deleted quiz {quiz_id}")
        else:
            logger.warning(f"Delete of quiz {quiz_id} matched nothing for user {session.user_id}")

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    async def submit_result(
        self,
        session: Optional[Session],
        quiz_id: str,
        answers: Sequence[Optional[int]],
    ) -> QuizResult:
        """Score an attempt against the stored quiz and persist the result"""
        session = _require_session(session)

        quiz = await self._fetch_quiz(session, quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz not found")

        score = score_answers(quiz.questions, answers)
        total = len(quiz.questions)
        result = QuizResult(
            quiz_id=quiz.id,
            user_id=session.user_id,
            score=score,
            total_questions=total,
            percentage=percentage(score, total),
            answers=list(answers),
        )

        response = await self.store.table(self.RESULTS_TABLE, session).insert(result.model_dump()).execute()
        if not response.ok:
            logger.error(f"Error saving result for quiz {quiz_id}: {response.error.message}")
            raise RemoteError(response.error.message)

        logger.info(f"Quiz {quiz_id} submitted: {score}/{total} ({result.percentage}%)")
        return result

    async def list_results(self, session: Optional[Session], quiz_id: str = None) -> List[QuizResult]:
        """Results for the user's quizzes, optionally one quiz only, newest first"""
        if session is None:
            return []

        owned = await (
            self.store.table(self.TABLE, session).select("id").eq("user_id", session.user_id).execute()
        )
        if not owned.ok:
            logger.error(f"Error listing quizzes for results: {owned.error.message}")
            return []

        quiz_ids = {row["id"] for row in owned.rows}
        if quiz_id is not None:
            quiz_ids &= {quiz_id}
        if not quiz_ids:
            return []

        response = await (
            self.store.table(self.RESULTS_TABLE, session)
            .select()
            .in_("quiz_id", sorted(quiz_ids))
            .order("completed_at", desc=True)
            .execute()
        )
        if not response.ok:
            logger.error(f"Error listing quiz results: {response.error.message}")
            return []

        return [QuizResult.model_validate(row) for row in response.rows]

    # ------------------------------------------------------------------
    # Sample data
    # ------------------------------------------------------------------

    async def ensure_sample_quiz(self, session: Optional[Session]) -> Optional[Quiz]:
        """
        Give a user with no quizzes the demo "Basic Mathematics" quiz.
        Returns the created quiz, or None if nothing was created.
        """
        if session is None:
            return None

        response = await (
            self.store.table(self.TABLE, session).select("id").eq("user_id", session.user_id).execute()
        )
        if not response.ok:
            raise RemoteError(response.error.message)
        if response.rows:
            return None

        logger.info(f"Seeding sample quiz for user {session.user_id}")
        return await self.create_quiz(session, SAMPLE_QUIZ)
