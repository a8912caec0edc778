# =============================================================================
# TESTES - Registro de tentativas (app_state)
# =============================================================================
# Tentativas finalizadas nao ficam no registro para sempre
# =============================================================================

import os
import time
from unittest.mock import patch

import pytest

import app_state

RETENTION = 300


@pytest.fixture(autouse=True)
def clean_registry():
    app_state.reset()
    yield
    app_state.reset()


def later(seconds: float = RETENTION + 1) -> float:
    return time.monotonic() + seconds


class TestSessionRegistry:
    """Testes para descarte de tentativas."""

    @pytest.mark.asyncio
    async def test_submitted_sessions_evicted_after_retention(
        self, student, make_session, published_quiz, student_stats
    ):
        quiz, _ = published_quiz
        submitted = []
        for _ in range(5):
            session = make_session(student, quiz.id)
            await session.load()
            app_state.register_session(session)
            await session.submit()
            submitted.append(session)

        assert len(app_state.sessions) == 5

        removed = app_state.prune_sessions(now=later())

        assert removed == 5
        assert app_state.sessions == {}
        assert app_state.last_seen == {}
        assert all(s.disposed for s in submitted)

    @pytest.mark.asyncio
    async def test_recent_submitted_session_kept(
        self, student, make_session, published_quiz, student_stats
    ):
        """Dentro da retencao o envio repetido ainda retorna o resultado."""
        quiz, _ = published_quiz
        session = make_session(student, quiz.id)
        await session.load()
        app_state.register_session(session)
        outcome = await session.submit()

        assert app_state.prune_sessions() == 0
        again = await app_state.get_session(session.session_id, student.id).submit()
        assert again is outcome

    @pytest.mark.asyncio
    async def test_zero_retention_drops_on_next_registration(
        self, student, make_session, published_quiz, student_stats
    ):
        from eduquiz.config import reset_config

        quiz, _ = published_quiz
        with patch.dict(os.environ, {"QUIZ_SESSION_RETENTION": "0"}):
            reset_config()
            first = make_session(student, quiz.id)
            await first.load()
            app_state.register_session(first)
            await first.submit()

            second = make_session(student, quiz.id)
            await second.load()
            app_state.register_session(second)

        reset_config()
        assert list(app_state.sessions) == [second.session_id]

    @pytest.mark.asyncio
    async def test_active_session_with_time_left_kept(
        self, student, make_session, published_quiz
    ):
        quiz, _ = published_quiz
        session = make_session(student, quiz.id)
        await session.load()
        app_state.register_session(session)

        assert app_state.prune_sessions(now=later(3600)) == 0
        assert session.session_id in app_state.sessions

    @pytest.mark.asyncio
    async def test_abandoned_expired_session_closed(self, student, make_session, make_quiz):
        """Tentativa abandonada com tempo esgotado e encerrada apos a retencao."""
        from eduquiz.models.enums import SessionStatus

        quiz, _ = await make_quiz("teacher-1", duration_minutes=1)
        session = make_session(student, quiz.id)
        await session.load()
        app_state.register_session(session)
        for _ in range(60):
            session.tick()

        assert app_state.prune_sessions() == 0

        assert app_state.prune_sessions(now=later()) == 1
        assert session.disposed is True
        assert session.status is SessionStatus.CLOSED

    @pytest.mark.asyncio
    async def test_access_refreshes_idle_time(
        self, student, make_session, published_quiz, student_stats
    ):
        quiz, _ = published_quiz
        session = make_session(student, quiz.id)
        await session.load()
        app_state.register_session(session)
        await session.submit()
        app_state.last_seen[session.session_id] -= RETENTION * 2

        app_state.get_session(session.session_id, student.id)

        assert app_state.prune_sessions(now=later(RETENTION - 10)) == 0

    @pytest.mark.asyncio
    async def test_closed_session_dropped(self, student, make_session, published_quiz):
        quiz, _ = published_quiz
        session = make_session(student, quiz.id)
        await session.load()
        app_state.register_session(session)
        session.close()

        assert app_state.prune_sessions() == 1
        assert app_state.active_session_count() == 0
