"""Quiz Router - Endpoints FastAPI do motor de quiz."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

import app_state

from .config import QuizConfig, get_config
from .engine.authoring import QuizAuthor
from .engine.catalog import QuizCatalog
from .engine.session import QuizSession
from .exceptions import (
    AuthorizationError,
    PersistenceError,
    QuizError,
    QuizNotFoundError,
    QuizValidationError,
    ScoringError,
    SessionStateError,
)
from .identity import Actor, HeaderIdentityProvider
from .models.enums import QuizDifficulty
from .models.schemas import (
    AnswerRequest,
    NotificationView,
    PublicQuestion,
    Quiz,
    QuizDetailResponse,
    QuizPayload,
    QuizResult,
    SessionView,
    StartSessionRequest,
)
from .notifications import UserNotifier
from .storage.quiz_store import QuizStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz", tags=["Quiz"])

# =============================================================================
# ERROR HANDLING
# =============================================================================

ERROR_STATUS = {
    QuizValidationError: 422,
    ScoringError: 422,
    QuizNotFoundError: 404,
    AuthorizationError: 403,
    SessionStateError: 409,
    PersistenceError: 503,
}


def status_for(error: QuizError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 400


async def quiz_error_handler(request: Request, exc: QuizError) -> JSONResponse:
    """Converte QuizError em resposta JSON."""
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} -> {status}: {exc.message}")
    return JSONResponse(
        status_code=status,
        content={"detail": exc.message, "errors": exc.details.get("errors", [])},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QuizError, quiz_error_handler)


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================


def get_actor(request: Request) -> Actor:
    """Ator atual a partir dos headers de identidade."""
    actor = HeaderIdentityProvider(request.headers).current_user()
    if actor is None:
        raise HTTPException(status_code=401, detail="Autenticação necessária")
    return actor


def get_store() -> QuizStore:
    return app_state.get_store()


def get_notifier(actor: Actor = Depends(get_actor)) -> UserNotifier:
    return app_state.get_inbox().for_user(actor.id)


def get_quiz_config() -> QuizConfig:
    return get_config()


def _session_view(session: QuizSession) -> SessionView:
    state = session.snapshot()
    current = session.current_question
    return SessionView(
        session_id=state.session_id,
        quiz_id=state.quiz_id,
        title=session.quiz.title if session.quiz else "",
        status=state.status,
        current_index=state.current_index,
        total_questions=state.total_questions,
        remaining_seconds=state.remaining_seconds,
        progress=session.progress,
        is_last=session.is_last,
        submitting=session.submitting,
        input_locked=state.input_locked,
        answers=state.answers,
        current_question=PublicQuestion.from_question(current) if current else None,
        outcome=session.outcome,
    )


# =============================================================================
# CATALOG
# =============================================================================


@router.get("/catalog", response_model=list[Quiz])
async def list_published(
    subject: str | None = None,
    difficulty: QuizDifficulty | None = None,
    actor: Actor = Depends(get_actor),
    store: QuizStore = Depends(get_store),
):
    """Quizzes publicados, mais recentes primeiro."""
    return await QuizCatalog(actor, store).list_published(subject=subject, difficulty=difficulty)


@router.get("/catalog/mine", response_model=list[Quiz])
async def list_own(
    author_id: str | None = None,
    actor: Actor = Depends(get_actor),
    store: QuizStore = Depends(get_store),
):
    """Quizzes do autor (rascunhos e publicados)."""
    return await QuizCatalog(actor, store).list_own(author_id)


@router.get("/results", response_model=list[QuizResult])
async def list_results(
    user_id: str | None = None,
    actor: Actor = Depends(get_actor),
    store: QuizStore = Depends(get_store),
):
    """Historico de tentativas do usuario."""
    return await QuizCatalog(actor, store).list_results(user_id)


# =============================================================================
# AUTHORING
# =============================================================================


@router.post("/quizzes", response_model=Quiz, status_code=201)
async def create_quiz(
    payload: QuizPayload,
    actor: Actor = Depends(get_actor),
    store: QuizStore = Depends(get_store),
    notifier: UserNotifier = Depends(get_notifier),
    config: QuizConfig = Depends(get_quiz_config),
):
    """Cria quiz (rascunho ou publicado) com suas perguntas."""
    author = QuizAuthor.from_payload(actor, store, payload, notifier=notifier, config=config)
    return await author.save(publish=payload.publish)


@router.get("/quizzes/{quiz_id}", response_model=QuizDetailResponse)
async def get_quiz_detail(
    quiz_id: str,
    actor: Actor = Depends(get_actor),
    store: QuizStore = Depends(get_store),
    config: QuizConfig = Depends(get_quiz_config),
):
    """Quiz com gabarito (apenas autor/admin)."""
    quiz, questions = await QuizAuthor(actor, store, config=config).fetch(quiz_id)
    return QuizDetailResponse(quiz=quiz, questions=questions)


@router.put("/quizzes/{quiz_id}", response_model=Quiz)
async def update_quiz(
    quiz_id: str,
    payload: QuizPayload,
    actor: Actor = Depends(get_actor),
    store: QuizStore = Depends(get_store),
    notifier: UserNotifier = Depends(get_notifier),
    config: QuizConfig = Depends(get_quiz_config),
):
    """Substitui metadados e perguntas de um quiz existente."""
    author = await QuizAuthor.edit(actor, store, quiz_id, notifier=notifier, config=config)
    author.apply_payload(payload)
    return await author.save(publish=payload.publish)


@router.post("/quizzes/{quiz_id}/publish", response_model=Quiz)
async def publish_quiz(
    quiz_id: str,
    actor: Actor = Depends(get_actor),
    store: QuizStore = Depends(get_store),
    notifier: UserNotifier = Depends(get_notifier),
    config: QuizConfig = Depends(get_quiz_config),
):
    return await QuizAuthor(actor, store, notifier=notifier, config=config).set_published(
        quiz_id, True
    )


@router.post("/quizzes/{quiz_id}/unpublish", response_model=Quiz)
async def unpublish_quiz(
    quiz_id: str,
    actor: Actor = Depends(get_actor),
    store: QuizStore = Depends(get_store),
    notifier: UserNotifier = Depends(get_notifier),
    config: QuizConfig = Depends(get_quiz_config),
):
    return await QuizAuthor(actor, store, notifier=notifier, config=config).set_published(
        quiz_id, False
    )


# =============================================================================
# SESSIONS
# =============================================================================


@router.post("/sessions", response_model=SessionView, status_code=201)
async def start_session(
    payload: StartSessionRequest,
    actor: Actor = Depends(get_actor),
    store: QuizStore = Depends(get_store),
    notifier: UserNotifier = Depends(get_notifier),
    config: QuizConfig = Depends(get_quiz_config),
):
    """Inicia tentativa: carrega quiz, perguntas e cronometro."""
    session = QuizSession(actor, payload.quiz_id, store, notifier=notifier, config=config)
    await session.load()
    app_state.register_session(session)
    return _session_view(session)


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session(session_id: str, actor: Actor = Depends(get_actor)):
    return _session_view(app_state.get_session(session_id, actor.id))


@router.put("/sessions/{session_id}/answers/{question_id}", response_model=SessionView)
async def set_answer(
    session_id: str,
    question_id: str,
    answer: AnswerRequest,
    actor: Actor = Depends(get_actor),
):
    session = app_state.get_session(session_id, actor.id)
    session.set_answer(question_id, answer.value)
    return _session_view(session)


@router.post("/sessions/{session_id}/next", response_model=SessionView)
async def next_question(session_id: str, actor: Actor = Depends(get_actor)):
    session = app_state.get_session(session_id, actor.id)
    session.next()
    return _session_view(session)


@router.post("/sessions/{session_id}/previous", response_model=SessionView)
async def previous_question(session_id: str, actor: Actor = Depends(get_actor)):
    session = app_state.get_session(session_id, actor.id)
    session.previous()
    return _session_view(session)


@router.post("/sessions/{session_id}/submit", response_model=SessionView)
async def submit_session(session_id: str, actor: Actor = Depends(get_actor)):
    """Envia a tentativa (repetir o envio retorna o mesmo resultado)."""
    session = app_state.get_session(session_id, actor.id)
    await session.submit()
    return _session_view(session)


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str, actor: Actor = Depends(get_actor)):
    """Sai da tentativa (cancela cronometro)."""
    app_state.drop_session(session_id, actor.id)


# =============================================================================
# NOTIFICATIONS
# =============================================================================


@router.get("/notifications", response_model=list[NotificationView])
async def drain_notifications(actor: Actor = Depends(get_actor)):
    """Notificacoes pendentes do usuario (consumidas na leitura)."""
    return app_state.get_inbox().drain(actor.id)
