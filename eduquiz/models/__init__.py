"""Quiz Models - Enums, Schemas e State."""

from .enums import (
    NotificationKind,
    QuestionType,
    QuizDifficulty,
    SessionStatus,
    TimeoutPolicy,
    UserRole,
)
from .schemas import (
    AnswerRequest,
    NotificationView,
    PublicQuestion,
    Question,
    QuestionPayload,
    Quiz,
    QuizDetailResponse,
    QuizPayload,
    QuizResult,
    ScoreResult,
    SessionView,
    StartSessionRequest,
    SubmissionOutcome,
    UserStats,
)
from .state import QuestionDraft, QuizDraft, SessionState

__all__ = [
    # Enums
    "NotificationKind",
    "QuestionType",
    "QuizDifficulty",
    "SessionStatus",
    "TimeoutPolicy",
    "UserRole",
    # Registros
    "Quiz",
    "Question",
    "QuizResult",
    "UserStats",
    # Motor
    "ScoreResult",
    "SubmissionOutcome",
    # Request/Response
    "AnswerRequest",
    "NotificationView",
    "PublicQuestion",
    "QuestionPayload",
    "QuizDetailResponse",
    "QuizPayload",
    "SessionView",
    "StartSessionRequest",
    # State
    "QuestionDraft",
    "QuizDraft",
    "SessionState",
]
