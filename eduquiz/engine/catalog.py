"""Quiz Catalog - Listagens somente leitura."""

from __future__ import annotations

import logging

from ..exceptions import AuthorizationError
from ..identity import Actor, require_author
from ..models.enums import QuizDifficulty
from ..models.schemas import Quiz, QuizResult
from ..storage.quiz_store import QuizStore

logger = logging.getLogger(__name__)


class QuizCatalog:
    """Catalogo de quizzes visto por um ator.

    Lista vazia e um estado valido (nada publicado ainda), nao um erro.
    """

    def __init__(self, actor: Actor, store: QuizStore):
        self.actor = actor
        self.store = store

    async def list_published(
        self,
        subject: str | None = None,
        difficulty: QuizDifficulty | None = None,
    ) -> list[Quiz]:
        """Quizzes publicados, mais recentes primeiro.

        Args:
            subject: Filtra por materia (case-insensitive)
            difficulty: Filtra por dificuldade
        """
        quizzes = await self.store.list_published()
        if subject:
            wanted = subject.strip().casefold()
            quizzes = [q for q in quizzes if q.subject.strip().casefold() == wanted]
        if difficulty is not None:
            quizzes = [q for q in quizzes if q.difficulty == difficulty]
        return quizzes

    async def list_own(self, author_id: str | None = None) -> list[Quiz]:
        """Quizzes de um autor em qualquer estado, mais recentes primeiro.

        Args:
            author_id: Autor a listar (padrao: o proprio ator; outros so admin)
        """
        actor = require_author(self.actor)
        author_id = author_id or actor.id
        if author_id != actor.id and not actor.view.can_manage_any():
            raise AuthorizationError(
                "Sem permissão para listar quizzes de outro autor",
                details={"user_id": actor.id, "author_id": author_id},
            )
        return await self.store.list_by_author(author_id)

    async def list_results(self, user_id: str | None = None) -> list[QuizResult]:
        """Historico de tentativas, mais recentes primeiro."""
        user_id = user_id or self.actor.id
        if user_id != self.actor.id and not self.actor.view.can_manage_any():
            raise AuthorizationError(
                "Sem permissão para ver resultados de outro usuário",
                details={"user_id": self.actor.id, "target": user_id},
            )
        return await self.store.list_results(user_id)
