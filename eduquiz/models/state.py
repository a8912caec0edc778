"""Quiz State - Estado em memoria de rascunhos e tentativas."""

import uuid
from dataclasses import dataclass, field
from typing import Any

from .enums import QuestionType, QuizDifficulty, SessionStatus


def _local_id() -> str:
    return uuid.uuid4().hex


@dataclass
class QuestionDraft:
    """Pergunta em edicao no formulario de autoria.

    O ``id`` e local (apenas para editar/remover); ao persistir, cada
    pergunta recebe um ID do servidor e ``order_number`` pela posicao.
    """

    id: str = field(default_factory=_local_id)
    question_text: str = ""
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    correct_answer: str = ""
    options: list[str] | None = None
    points: int = 1

    @classmethod
    def blank(cls, option_slots: int = 4) -> "QuestionDraft":
        """Cria pergunta vazia de multipla escolha."""
        return cls(options=[""] * option_slots)

    def cleaned_options(self) -> list[str] | None:
        """Opcoes que vao para o banco (slots vazios descartados)."""
        if self.question_type is not QuestionType.MULTIPLE_CHOICE:
            return None
        return [o.strip() for o in (self.options or []) if o and o.strip()]

    def to_record(self, quiz_id: str | None, order_number: int) -> dict[str, Any]:
        """Converte para linha da tabela ``quiz_questions``."""
        record = {
            "question_text": self.question_text.strip(),
            "question_type": self.question_type.value,
            "correct_answer": self.correct_answer.strip(),
            "options": self.cleaned_options(),
            "points": self.points,
            "order_number": order_number,
        }
        if quiz_id is not None:
            record["quiz_id"] = quiz_id
        return record


@dataclass
class QuizDraft:
    """Metadados do quiz em edicao."""

    title: str = ""
    description: str | None = None
    subject: str = ""
    difficulty: QuizDifficulty = QuizDifficulty.EASY
    duration_minutes: int = 15
    xp_reward: int = 50

    EDITABLE_FIELDS = (
        "title",
        "description",
        "subject",
        "difficulty",
        "duration_minutes",
        "xp_reward",
    )

    def to_record(self, author_id: str, published: bool) -> dict[str, Any]:
        """Converte para linha da tabela ``quizzes``."""
        return {
            "title": self.title.strip(),
            "description": (self.description or "").strip() or None,
            "subject": self.subject.strip(),
            "difficulty": self.difficulty.value,
            "duration_minutes": self.duration_minutes,
            "xp_reward": self.xp_reward,
            "created_by": author_id,
            "is_published": published,
        }


@dataclass
class SessionState:
    """Snapshot de uma tentativa em andamento.

    Attributes:
        session_id: ID da tentativa
        quiz_id: Quiz sendo respondido
        user_id: Ator dono da tentativa
        status: Estado atual (loading/active/submitted/error/closed)
        current_index: Pergunta exibida (0-based)
        total_questions: Quantidade de perguntas carregadas
        remaining_seconds: Tempo restante no cronometro
        answers: Respostas capturadas (question_id -> valor)
        input_locked: Se respostas estao bloqueadas (tempo esgotado)
        result_id: ID do resultado persistido (apos envio)
    """

    session_id: str
    quiz_id: str
    user_id: str
    status: SessionStatus = SessionStatus.LOADING
    current_index: int = 0
    total_questions: int = 0
    remaining_seconds: int = 0
    answers: dict[str, str] = field(default_factory=dict)
    input_locked: bool = False
    result_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Converte para dicionario (para API/log)."""
        return {
            "session_id": self.session_id,
            "quiz_id": self.quiz_id,
            "user_id": self.user_id,
            "status": self.status.value,
            "current_index": self.current_index,
            "total_questions": self.total_questions,
            "remaining_seconds": self.remaining_seconds,
            "answers": dict(self.answers),
            "input_locked": self.input_locked,
            "result_id": self.result_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionState":
        """Cria instancia a partir de dicionario."""
        return cls(
            session_id=data["session_id"],
            quiz_id=data["quiz_id"],
            user_id=data["user_id"],
            status=SessionStatus(data.get("status", SessionStatus.LOADING.value)),
            current_index=data.get("current_index", 0),
            total_questions=data.get("total_questions", 0),
            remaining_seconds=data.get("remaining_seconds", 0),
            answers=dict(data.get("answers", {})),
            input_locked=data.get("input_locked", False),
            result_id=data.get("result_id"),
        )
