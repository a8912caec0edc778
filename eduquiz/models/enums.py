"""Quiz Enums - Dificuldade, tipos de pergunta, papeis e estados."""

from enum import Enum


class QuizDifficulty(str, Enum):
    """Niveis de dificuldade exibidos no catalogo."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class QuestionType(str, Enum):
    """Tipos de pergunta suportados."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"


class UserRole(str, Enum):
    """Papeis do ator autenticado."""

    STUDENT = "student"
    PARENT = "parent"
    TEACHER = "teacher"
    ADMIN = "admin"


class SessionStatus(str, Enum):
    """Estados de uma tentativa (sessao) de quiz."""

    LOADING = "loading"
    ACTIVE = "active"
    SUBMITTED = "submitted"
    ERROR = "error"
    CLOSED = "closed"


class TimeoutPolicy(str, Enum):
    """O que acontece quando o cronometro chega a zero."""

    NONE = "none"  # Cronometro para, nada mais
    AUTO_SUBMIT = "auto_submit"
    LOCK_INPUT = "lock_input"  # Respostas bloqueadas, envio ainda permitido


class NotificationKind(str, Enum):
    """Tipo de notificacao (toast) enviada ao usuario."""

    SUCCESS = "success"
    ERROR = "error"


TRUE_FALSE_ANSWERS = ("True", "False")
