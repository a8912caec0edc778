"""Quiz Engines - Logica de negocios."""

from .authoring import QuizAuthor
from .catalog import QuizCatalog
from .scoring_engine import QuizScoringEngine
from .session import QuizSession
from .timer import Countdown

__all__ = ["QuizScoringEngine", "QuizAuthor", "QuizCatalog", "QuizSession", "Countdown"]
