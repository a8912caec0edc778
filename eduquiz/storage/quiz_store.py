"""Quiz Store - Acesso tipado as tabelas do quiz sobre o PersistenceGateway."""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import PersistenceError, QuizError, QuizNotFoundError
from ..models.schemas import Question, Quiz, QuizResult, UserStats
from .gateway import PersistenceGateway

logger = logging.getLogger(__name__)


class QuizStore:
    """Abstração sobre o PersistenceGateway para as tabelas do quiz.

    Converte linhas (dicts) em modelos Pydantic e centraliza nomes de
    tabelas, filtros e ordenacao.

    Tabelas:
        - quizzes -> Quiz (metadados, autor, publicado)
        - quiz_questions -> Question (ordenadas por order_number)
        - quiz_results -> QuizResult (historico, append-only)
        - user_stats -> UserStats (xp acumulado)

    Example:
        >>> store = QuizStore(InMemoryGateway())
        >>> quiz, questions = await store.save_quiz(quiz_record, question_records)
        >>> loaded = await store.get_quiz(quiz.id)
    """

    QUIZZES = "quizzes"
    QUESTIONS = "quiz_questions"
    RESULTS = "quiz_results"
    STATS = "user_stats"

    def __init__(self, gateway: PersistenceGateway):
        """Inicializa store com o gateway configurado.

        Args:
            gateway: Implementacao de PersistenceGateway (memoria ou Supabase)
        """
        self.gateway = gateway

    @staticmethod
    def _wrap(error: Exception, action: str) -> PersistenceError:
        if isinstance(error, PersistenceError):
            return error
        return PersistenceError(
            f"Falha ao {action}", details={"error": f"{type(error).__name__}: {error}"}
        )

    async def _call(self, action: str, coro) -> Any:
        try:
            return await coro
        except QuizError:
            raise
        except Exception as e:
            logger.error(f"Falha ao {action}: {e}")
            raise self._wrap(e, action) from e

    # =========================================================================
    # QUIZZES
    # =========================================================================

    async def get_quiz(self, quiz_id: str) -> Quiz | None:
        """Busca quiz por ID.

        Returns:
            Quiz se encontrado, None caso contrário
        """
        row = await self._call(
            "carregar quiz", self.gateway.select_one(self.QUIZZES, {"id": quiz_id})
        )
        if not row:
            logger.debug(f"Quiz não encontrado: {quiz_id}")
            return None
        return Quiz.model_validate(row)

    async def get_questions(self, quiz_id: str) -> list[Question]:
        """Perguntas do quiz em ordem de apresentacao."""
        rows = await self._call(
            "carregar perguntas",
            self.gateway.select(
                self.QUESTIONS, {"quiz_id": quiz_id}, order_by="order_number"
            ),
        )
        return [Question.model_validate(r) for r in rows]

    async def save_quiz(
        self,
        quiz: dict[str, Any],
        questions: list[dict[str, Any]],
        quiz_id: str | None = None,
    ) -> tuple[Quiz, list[Question]]:
        """Grava quiz + perguntas como uma unidade.

        Args:
            quiz: Linha da tabela quizzes (sem id)
            questions: Linhas de quiz_questions (sem quiz_id)
            quiz_id: Se informado, edita o quiz existente e substitui perguntas

        Returns:
            Tuple de (quiz salvo, perguntas salvas)
        """
        parent, children = await self._call(
            "salvar quiz",
            self.gateway.save_aggregate(
                self.QUIZZES,
                quiz,
                self.QUESTIONS,
                questions,
                foreign_key="quiz_id",
                parent_id=quiz_id,
            ),
        )
        saved = Quiz.model_validate(parent)
        logger.info(f"Quiz salvo: {saved.id} ({len(children)} perguntas)")
        return saved, [Question.model_validate(c) for c in children]

    async def set_published(self, quiz_id: str, published: bool) -> Quiz:
        """Publica ou despublica um quiz."""
        rows = await self._call(
            "atualizar quiz",
            self.gateway.update(self.QUIZZES, {"id": quiz_id}, {"is_published": published}),
        )
        if not rows:
            raise QuizNotFoundError(f"Quiz {quiz_id} não encontrado", details={"quiz_id": quiz_id})
        logger.info(f"Quiz {quiz_id} is_published={published}")
        return Quiz.model_validate(rows[0])

    async def list_published(self) -> list[Quiz]:
        """Quizzes publicados, mais recentes primeiro."""
        rows = await self._call(
            "listar quizzes",
            self.gateway.select(
                self.QUIZZES, {"is_published": True}, order_by="created_at", descending=True
            ),
        )
        return [Quiz.model_validate(r) for r in rows]

    async def list_by_author(self, author_id: str) -> list[Quiz]:
        """Quizzes de um autor (qualquer estado), mais recentes primeiro."""
        rows = await self._call(
            "listar quizzes do autor",
            self.gateway.select(
                self.QUIZZES, {"created_by": author_id}, order_by="created_at", descending=True
            ),
        )
        return [Quiz.model_validate(r) for r in rows]

    # =========================================================================
    # RESULTADOS E XP
    # =========================================================================

    async def insert_result(
        self,
        user_id: str,
        quiz: Quiz,
        score: int,
        total_questions: int,
        time_taken_seconds: int,
    ) -> QuizResult:
        """Registra resultado de uma tentativa concluida."""
        row = await self._call(
            "gravar resultado",
            self.gateway.insert(
                self.RESULTS,
                {
                    "user_id": user_id,
                    "quiz_id": quiz.id,
                    "subject": quiz.subject,
                    "score": score,
                    "total_questions": total_questions,
                    "time_taken_seconds": time_taken_seconds,
                },
            ),
        )
        result = QuizResult.model_validate(row)
        logger.info(f"Resultado gravado: user={user_id} quiz={quiz.id} score={score}")
        return result

    async def list_results(self, user_id: str) -> list[QuizResult]:
        """Historico de resultados do usuario, mais recentes primeiro."""
        rows = await self._call(
            "listar resultados",
            self.gateway.select(
                self.RESULTS, {"user_id": user_id}, order_by="completed_at", descending=True
            ),
        )
        return [QuizResult.model_validate(r) for r in rows]

    async def get_stats(self, user_id: str) -> UserStats | None:
        """Stats do usuario (criado pelo onboarding, nao por este motor)."""
        row = await self._call(
            "carregar stats", self.gateway.select_one(self.STATS, {"user_id": user_id})
        )
        return UserStats.model_validate(row) if row else None

    async def award_xp(self, user_id: str, amount: int) -> int | None:
        """Credita XP com incremento atomico no armazenamento.

        Returns:
            XP total apos o credito, ou None se o usuario nao tem stats
        """
        new_xp = await self._call(
            "creditar XP",
            self.gateway.increment(self.STATS, {"user_id": user_id}, "xp", amount),
        )
        if new_xp is None:
            logger.warning(f"user_stats ausente para {user_id}, XP não creditado")
        else:
            logger.debug(f"XP creditado: user={user_id} +{amount} -> {new_xp}")
        return new_xp
