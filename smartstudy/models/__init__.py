"""Data models for SmartStudy"""

from smartstudy.models.auth import (
    User, Session,
    LoginRequest, SignupRequest, UpdateProfileRequest, ChangePasswordRequest,
    AuthResponse
)

from smartstudy.models.note import (
    Note,
    CreateNoteRequest, UpdateNoteRequest,
    NoteResponse, ListNotesResponse
)

from smartstudy.models.quiz import (
    Quiz, QuizQuestion, QuizQuestionInput, QuizResult,
    CreateQuizRequest, SubmitQuizRequest,
    QuizResponse, ListQuizzesResponse,
    SubmitQuizResponse, ListResultsResponse
)

from smartstudy.models.lookup import (
    DictionaryEntry, Phonetic, Meaning, Definition, DictionaryResponse,
    TriviaQuestion, TriviaCategory,
    TriviaQuestionsResponse, TriviaCategoriesResponse
)

from smartstudy.models.schemas import (
    ErrorResponse, SuccessResponse, HealthResponse
)
