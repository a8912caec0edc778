"""Core module - shared state and helper functions."""

from __future__ import annotations

import logging
import time
from typing import Optional

from eduquiz.config import get_config
from eduquiz.engine.session import QuizSession
from eduquiz.exceptions import QuizNotFoundError
from eduquiz.models.enums import SessionStatus
from eduquiz.notifications import NotificationInbox
from eduquiz.storage import PersistenceGateway, QuizStore, create_gateway

logger = logging.getLogger(__name__)

# =============================================================================
# GLOBAL INSTANCES
# =============================================================================

gateway: Optional[PersistenceGateway] = None
store: Optional[QuizStore] = None
inbox: NotificationInbox = NotificationInbox()

# Tentativas em andamento (session_id -> QuizSession)
sessions: dict[str, QuizSession] = {}
# Ultimo acesso de cada tentativa (time.monotonic)
last_seen: dict[str, float] = {}


# =============================================================================
# STORE
# =============================================================================


def get_store() -> QuizStore:
    """Get QuizStore instance (creates gateway on first use)."""
    global gateway, store

    if store is None:
        config = get_config()
        gateway = create_gateway(config)
        store = QuizStore(gateway)
        logger.info(f"QuizStore criado (backend: {config.storage_backend})")

    return store


def get_inbox() -> NotificationInbox:
    return inbox


# =============================================================================
# SESSION REGISTRY
# =============================================================================


def _finished(session: QuizSession) -> bool:
    return session.status is not SessionStatus.ACTIVE or session.remaining_seconds == 0


def prune_sessions(now: Optional[float] = None) -> int:
    """Descarta tentativas encerradas e as finalizadas ociosas alem da retencao.

    Finalizada = enviada, com erro ou com o cronometro zerado. Tentativas
    ativas com tempo restante nunca sao descartadas aqui.

    Returns:
        Quantidade de tentativas removidas
    """
    now = time.monotonic() if now is None else now
    retention = get_config().session_retention_seconds

    stale = [
        sid
        for sid, s in sessions.items()
        if s.disposed or (_finished(s) and now - last_seen.get(sid, now) >= retention)
    ]
    for session_id in stale:
        last_seen.pop(session_id, None)
        sessions.pop(session_id).close()

    if stale:
        logger.debug(f"{len(stale)} tentativas descartadas do registro")
    return len(stale)


def register_session(session: QuizSession) -> None:
    """Registra tentativa e descarta as ja encerradas/expiradas."""
    prune_sessions()
    sessions[session.session_id] = session
    last_seen[session.session_id] = time.monotonic()


def get_session(session_id: str, user_id: str) -> QuizSession:
    """Busca tentativa do usuario (tentativas de outros usuarios sao invisiveis)."""
    session = sessions.get(session_id)
    if session is None or session.actor.id != user_id or session.disposed:
        raise QuizNotFoundError(
            f"Sessão {session_id} não encontrada", details={"session_id": session_id}
        )
    last_seen[session_id] = time.monotonic()
    return session


def drop_session(session_id: str, user_id: str) -> QuizSession:
    """Encerra e remove tentativa."""
    session = get_session(session_id, user_id)
    session.close()
    sessions.pop(session_id, None)
    last_seen.pop(session_id, None)
    return session


def active_session_count() -> int:
    prune_sessions()
    return sum(1 for s in sessions.values() if s.status is SessionStatus.ACTIVE)


# =============================================================================
# CLEANUP
# =============================================================================


async def cleanup():
    """Cleanup resources on shutdown."""
    global gateway, store

    for session in list(sessions.values()):
        session.close()
    sessions.clear()
    last_seen.clear()

    if gateway is not None:
        await gateway.aclose()
        logger.info("Gateway fechado")

    gateway = None
    store = None


def reset() -> None:
    """Reset global state (tests)."""
    global gateway, store, inbox

    for session in list(sessions.values()):
        session.close()
    sessions.clear()
    last_seen.clear()
    gateway = None
    store = None
    inbox = NotificationInbox()
