"""Quiz Exceptions - Hierarquia de erros do motor de quiz."""

from typing import Any


class QuizError(Exception):
    """Erro base do motor de quiz.

    Attributes:
        message: Mensagem legivel (pode ir para o usuario)
        details: Dados extras para log/debug
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class QuizValidationError(QuizError):
    """Campos obrigatorios ausentes ou invalidos (recuperavel localmente)."""

    @property
    def errors(self) -> list[str]:
        return list(self.details.get("errors", []))


class QuizNotFoundError(QuizError):
    """Quiz, pergunta ou sessao inexistente."""


class PersistenceError(QuizError):
    """Falha em chamada ao gateway de persistencia."""


class ScoringError(QuizError):
    """Quiz sem pontos para calcular percentual."""


class AuthorizationError(QuizError):
    """Ator sem permissao para a operacao."""


class SessionStateError(QuizError):
    """Operacao invalida para o estado atual da sessao."""
