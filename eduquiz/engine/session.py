"""Quiz Session - Uma tentativa cronometrada de um quiz.

Estados::

    loading --load()--> active --submit()--> submitted
       |
       +--(quiz/perguntas ausentes, falha)--> error

``close()`` cancela o cronometro e descarta resultados que chegarem depois.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Awaitable, Callable

from ..config import QuizConfig, get_config
from ..exceptions import (
    AuthorizationError,
    QuizError,
    QuizNotFoundError,
    SessionStateError,
)
from ..identity import Actor
from ..models.enums import NotificationKind, SessionStatus, TimeoutPolicy
from ..models.schemas import Question, Quiz, QuizResult, SubmissionOutcome
from ..models.state import SessionState
from ..notifications import LoggingNotifier, Notifier
from ..storage.quiz_store import QuizStore
from .authoring import CATALOG_REDIRECT
from .scoring_engine import QuizScoringEngine
from .timer import Countdown

logger = logging.getLogger(__name__)


class QuizSession:
    """Tentativa de um ator em um quiz.

    Responsabilidades:
        - Carregar quiz + perguntas ordenadas
        - Cronometro regressivo (duration_minutes * 60)
        - Captura de respostas e navegacao anterior/proxima
        - Envio unico: pontuacao, resultado, credito de XP e notificacao

    Example:
        >>> session = QuizSession(student, quiz_id, store)
        >>> await session.load()
        >>> session.set_answer(session.current_question.id, "Paris")
        >>> session.next()
        >>> outcome = await session.submit()
        >>> outcome.score.score_percent
    """

    def __init__(
        self,
        actor: Actor,
        quiz_id: str,
        store: QuizStore,
        scoring: QuizScoringEngine | None = None,
        notifier: Notifier | None = None,
        config: QuizConfig | None = None,
        session_id: str | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if not actor.view.can_attempt():
            raise AuthorizationError(
                "Este perfil não pode responder quizzes",
                details={"user_id": actor.id, "role": actor.role.value},
            )

        self.actor = actor
        self.quiz_id = quiz_id
        self.store = store
        self.scoring = scoring or QuizScoringEngine()
        self.notifier = notifier or LoggingNotifier()
        self.config = config or get_config()
        self.session_id = session_id or uuid.uuid4().hex

        self.status = SessionStatus.LOADING
        self.quiz: Quiz | None = None
        self.questions: list[Question] = []
        self.answers: dict[str, str] = {}
        self.current_index = 0
        self.input_locked = False
        self.outcome: SubmissionOutcome | None = None
        self.redirect: str | None = None

        self._sleep = sleep
        self._countdown: Countdown | None = None
        self._pending_submit: asyncio.Future | None = None
        self._auto_submit_task: asyncio.Task | None = None
        self._result: QuizResult | None = None
        self._disposed = False

    # =========================================================================
    # PROPRIEDADES
    # =========================================================================

    @property
    def remaining_seconds(self) -> int:
        return self._countdown.remaining if self._countdown else 0

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question | None:
        if not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def is_last(self) -> bool:
        return bool(self.questions) and self.current_index == len(self.questions) - 1

    @property
    def progress(self) -> float:
        """Fracao de perguntas ja exibidas (barra de progresso)."""
        if not self.questions:
            return 0.0
        return (self.current_index + 1) / len(self.questions)

    @property
    def submitting(self) -> bool:
        return self._pending_submit is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    # =========================================================================
    # CARREGAMENTO
    # =========================================================================

    def _fail(self, message: str) -> None:
        self.status = SessionStatus.ERROR
        self.redirect = CATALOG_REDIRECT
        self.notifier.notify(NotificationKind.ERROR, message)

    def _can_see(self, quiz: Quiz) -> bool:
        return quiz.is_published or self.actor.view.can_manage(self.actor.id, quiz.created_by)

    async def load(self) -> None:
        """Busca quiz e perguntas; inicia o cronometro.

        Raises:
            QuizNotFoundError: Quiz inexistente, nao publicado ou sem perguntas
            PersistenceError: Falha no gateway
        """
        if self.status is not SessionStatus.LOADING:
            raise SessionStateError(
                "Sessão já carregada", details={"status": self.status.value}
            )

        try:
            quiz = await self.store.get_quiz(self.quiz_id)
            visible = quiz is not None and self._can_see(quiz)
            questions = await self.store.get_questions(self.quiz_id) if visible else []
        except QuizError as e:
            if self._disposed:
                logger.debug(f"[Sessão {self.session_id}] Falha após close descartada: {e}")
                return
            logger.error(f"[Sessão {self.session_id}] Falha ao carregar quiz {self.quiz_id}: {e}")
            self._fail("Failed to load quiz")
            raise

        if self._disposed:
            logger.debug(f"[Sessão {self.session_id}] Carregamento após close descartado")
            return

        if not visible or not questions:
            reason = "sem perguntas" if visible else "não encontrado"
            logger.warning(f"[Sessão {self.session_id}] Quiz {self.quiz_id} {reason}")
            self._fail("Failed to load quiz")
            raise QuizNotFoundError(
                f"Quiz {self.quiz_id} {reason}", details={"quiz_id": self.quiz_id}
            )

        self.quiz = quiz
        self.questions = questions
        self.current_index = 0
        self._countdown = Countdown(
            quiz.duration_seconds,
            on_expire=self._on_time_up,
            interval=self.config.tick_seconds,
            sleep=self._sleep,
        )
        self.status = SessionStatus.ACTIVE
        self._countdown.start()
        logger.info(
            f"[Sessão {self.session_id}] Quiz {quiz.id} iniciado por {self.actor.id} "
            f"({len(questions)} perguntas, {quiz.duration_seconds}s)"
        )

    # =========================================================================
    # CRONOMETRO
    # =========================================================================

    def tick(self) -> int:
        """Avanca o cronometro um segundo (apenas enquanto ativa)."""
        if self.status is not SessionStatus.ACTIVE or self._countdown is None:
            return self.remaining_seconds
        return self._countdown.tick()

    def _on_time_up(self) -> None:
        policy = self.config.timeout_policy
        logger.info(f"[Sessão {self.session_id}] Tempo esgotado (política: {policy.value})")

        if policy is TimeoutPolicy.LOCK_INPUT:
            self.input_locked = True
        elif policy is TimeoutPolicy.AUTO_SUBMIT:
            self._auto_submit_task = asyncio.ensure_future(self._auto_submit())

    async def _auto_submit(self) -> None:
        try:
            await self.submit()
        except QuizError as e:
            # Usuario ja foi notificado; envio manual continua disponivel
            logger.warning(f"[Sessão {self.session_id}] Envio automático falhou: {e}")
        except Exception:
            # Task sem await: erro inesperado precisa aparecer no log
            logger.exception(f"[Sessão {self.session_id}] Erro inesperado no envio automático")

    # =========================================================================
    # RESPOSTAS E NAVEGACAO
    # =========================================================================

    def _require_active(self) -> None:
        if self._disposed or self.status is not SessionStatus.ACTIVE:
            raise SessionStateError(
                "Sessão não está ativa",
                details={"status": self.status.value, "session_id": self.session_id},
            )

    def set_answer(self, question_id: str, value: str) -> None:
        """Grava (ou sobrescreve) a resposta de uma pergunta."""
        self._require_active()
        if self.input_locked:
            raise SessionStateError(
                "Tempo esgotado: respostas bloqueadas",
                details={"session_id": self.session_id},
            )
        if not any(q.id == question_id for q in self.questions):
            raise QuizNotFoundError(
                f"Pergunta {question_id} não pertence ao quiz",
                details={"question_id": question_id, "quiz_id": self.quiz_id},
            )
        self.answers[question_id] = value

    def next(self) -> int:
        """Avanca uma pergunta (no-op na ultima)."""
        self._require_active()
        if self.current_index < len(self.questions) - 1:
            self.current_index += 1
        return self.current_index

    def previous(self) -> int:
        """Volta uma pergunta (no-op na primeira)."""
        self._require_active()
        if self.current_index > 0:
            self.current_index -= 1
        return self.current_index

    # =========================================================================
    # ENVIO
    # =========================================================================

    def _time_taken(self) -> int:
        total = self.quiz.duration_seconds
        return min(total, max(0, total - self.remaining_seconds))

    def _clear_pending(self, _future: asyncio.Future) -> None:
        self._pending_submit = None

    async def submit(self) -> SubmissionOutcome:
        """Envia a tentativa (no maximo um envio por sessao).

        Chamadas concorrentes compartilham o mesmo envio em andamento; apos
        concluido, novas chamadas retornam o resultado ja gravado.

        Raises:
            SessionStateError: Sessao nao esta ativa
            PersistenceError: Falha ao gravar (sessao continua ativa)
        """
        if self.status is SessionStatus.SUBMITTED and self.outcome is not None:
            return self.outcome
        self._require_active()

        if self._pending_submit is None:
            self._pending_submit = asyncio.ensure_future(self._settle())
            self._pending_submit.add_done_callback(self._clear_pending)
        return await asyncio.shield(self._pending_submit)

    async def _settle(self) -> SubmissionOutcome:
        quiz = self.quiz
        try:
            score = self.scoring.calculate_score(self.questions, self.answers)
            if self._result is None:
                self._result = await self.store.insert_result(
                    user_id=self.actor.id,
                    quiz=quiz,
                    score=score.score_percent,
                    total_questions=len(self.questions),
                    time_taken_seconds=self._time_taken(),
                )
            new_xp = None
            if quiz.xp_reward > 0:
                new_xp = await self.store.award_xp(self.actor.id, quiz.xp_reward)
        except QuizError as e:
            logger.error(f"[Sessão {self.session_id}] Falha ao enviar: {e}")
            if not self._disposed:
                self.notifier.notify(NotificationKind.ERROR, "Failed to submit quiz")
            raise

        outcome = SubmissionOutcome(
            result=self._result,
            score=score,
            xp_awarded=quiz.xp_reward if new_xp is not None else 0,
            new_xp=new_xp,
        )

        if self._disposed:
            logger.debug(f"[Sessão {self.session_id}] Envio concluído após close, estado descartado")
            return outcome

        if self._countdown is not None:
            self._countdown.cancel()
        self.outcome = outcome
        self.status = SessionStatus.SUBMITTED
        self.notifier.notify(
            NotificationKind.SUCCESS,
            f"Quiz completed! Score: {score.score_percent}% (+{outcome.xp_awarded} XP)",
        )
        logger.info(
            f"[Sessão {self.session_id}] Enviado: {score.score_percent}% "
            f"({score.raw_points}/{score.total_points} pts), +{outcome.xp_awarded} XP"
        )
        return outcome

    # =========================================================================
    # CICLO DE VIDA
    # =========================================================================

    def close(self) -> None:
        """Encerra a sessao (saida para o catalogo ou teardown)."""
        if self._disposed:
            return
        self._disposed = True
        if self._countdown is not None:
            self._countdown.cancel()
        if self.status is not SessionStatus.SUBMITTED:
            self.status = SessionStatus.CLOSED
        self.redirect = CATALOG_REDIRECT
        logger.debug(f"[Sessão {self.session_id}] Encerrada")

    def snapshot(self) -> SessionState:
        """Estado atual (sem gabarito)."""
        return SessionState(
            session_id=self.session_id,
            quiz_id=self.quiz_id,
            user_id=self.actor.id,
            status=self.status,
            current_index=self.current_index,
            total_questions=len(self.questions),
            remaining_seconds=self.remaining_seconds,
            answers=dict(self.answers),
            input_locked=self.input_locked,
            result_id=self._result.id if self._result else None,
        )
