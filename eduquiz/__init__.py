"""EduQuiz - Motor de quizzes (autoria, catalogo, tentativa e XP).

Arquitetura:
- models/: Enums, Schemas Pydantic, estado de rascunho/sessao
- engine/: QuizScoringEngine, QuizAuthor, QuizCatalog, QuizSession, Countdown
- storage/: PersistenceGateway (memoria/Supabase) e QuizStore
- identity.py: Actor e capacidades por papel
- notifications.py: Canal de notificacoes (toasts)
- router.py: FastAPI endpoints
"""

from .engine import Countdown, QuizAuthor, QuizCatalog, QuizScoringEngine, QuizSession
from .identity import Actor
from .models import QuestionType, QuizDifficulty, SessionStatus, TimeoutPolicy, UserRole
from .storage import InMemoryGateway, PersistenceGateway, QuizStore, SupabaseGateway

__version__ = "1.0.0"

__all__ = [
    # Models
    "QuestionType",
    "QuizDifficulty",
    "SessionStatus",
    "TimeoutPolicy",
    "UserRole",
    "Actor",
    # Engines
    "QuizScoringEngine",
    "QuizAuthor",
    "QuizCatalog",
    "QuizSession",
    "Countdown",
    # Storage
    "PersistenceGateway",
    "InMemoryGateway",
    "SupabaseGateway",
    "QuizStore",
]
