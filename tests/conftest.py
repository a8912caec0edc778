# =============================================================================
# CONFTEST - Fixtures compartilhadas para todos os testes
# =============================================================================
# Gateway em memoria, atores por papel, quizzes de exemplo e cliente HTTP
# =============================================================================

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio


# =============================================================================
# FIXTURES DE ATORES
# =============================================================================


@pytest.fixture
def teacher():
    """Professor (autor)."""
    from eduquiz.identity import Actor
    from eduquiz.models.enums import UserRole

    return Actor(id="teacher-1", role=UserRole.TEACHER)


@pytest.fixture
def other_teacher():
    from eduquiz.identity import Actor
    from eduquiz.models.enums import UserRole

    return Actor(id="teacher-2", role=UserRole.TEACHER)


@pytest.fixture
def student():
    """Aluno (responde quizzes)."""
    from eduquiz.identity import Actor
    from eduquiz.models.enums import UserRole

    return Actor(id="student-1", role=UserRole.STUDENT)


@pytest.fixture
def parent():
    from eduquiz.identity import Actor
    from eduquiz.models.enums import UserRole

    return Actor(id="parent-1", role=UserRole.PARENT)


@pytest.fixture
def admin():
    from eduquiz.identity import Actor
    from eduquiz.models.enums import UserRole

    return Actor(id="admin-1", role=UserRole.ADMIN)


# =============================================================================
# FIXTURES DE PERSISTENCIA
# =============================================================================


@pytest.fixture
def gateway():
    """Gateway em memoria vazio."""
    from eduquiz.storage.gateway import InMemoryGateway

    return InMemoryGateway()


@pytest.fixture
def store(gateway):
    from eduquiz.storage.quiz_store import QuizStore

    return QuizStore(gateway)


@pytest.fixture
def mock_gateway():
    """Gateway totalmente mockado (verifica chamadas)."""
    from eduquiz.storage.gateway import PersistenceGateway

    mock = MagicMock(spec=PersistenceGateway)
    for name in (
        "insert",
        "insert_many",
        "select",
        "select_one",
        "update",
        "increment",
        "save_aggregate",
        "aclose",
    ):
        setattr(mock, name, AsyncMock())
    return mock


# =============================================================================
# FIXTURES DE CONFIGURACAO E NOTIFICACAO
# =============================================================================


@pytest.fixture
def quiz_config():
    """Configuracao padrao (sem politica de timeout)."""
    from eduquiz.config import QuizConfig

    return QuizConfig()


@pytest.fixture
def notifier():
    """Notifier que grava as chamadas."""
    return MagicMock()


@pytest.fixture
def stalled_sleep():
    """Sleep que nunca retorna: cronometro so avanca com tick() manual."""

    async def _sleep(_interval: float) -> None:
        await asyncio.Event().wait()

    return _sleep


# =============================================================================
# FIXTURES DE DADOS DE TESTE
# =============================================================================


def quiz_record(author_id: str, **overrides: Any) -> dict[str, Any]:
    """Linha de ``quizzes`` pronta para save_quiz."""
    record = {
        "title": "World Capitals",
        "description": "Capitals around the world",
        "subject": "Geography",
        "difficulty": "Easy",
        "duration_minutes": 15,
        "xp_reward": 50,
        "created_by": author_id,
        "is_published": True,
    }
    record.update(overrides)
    return record


def question_records() -> list[dict[str, Any]]:
    return [
        {
            "question_text": "What is the capital of France?",
            "question_type": "multiple_choice",
            "correct_answer": "Paris",
            "options": ["Paris", "Lyon", "Nice", "Lille"],
            "points": 1,
            "order_number": 1,
        },
        {
            "question_text": "Berlin is the capital of Germany.",
            "question_type": "true_false",
            "correct_answer": "True",
            "options": None,
            "points": 1,
            "order_number": 2,
        },
    ]


@pytest.fixture
def make_quiz(store):
    """Grava quiz de exemplo com campos sobrescritos."""

    async def _make(author_id: str, questions=None, **overrides):
        records = question_records() if questions is None else questions
        return await store.save_quiz(quiz_record(author_id, **overrides), records)

    return _make


@pytest_asyncio.fixture
async def published_quiz(store, teacher):
    """Quiz publicado com 2 perguntas (15 min, 50 XP)."""
    return await store.save_quiz(quiz_record(teacher.id), question_records())


@pytest_asyncio.fixture
async def draft_quiz(store, teacher):
    """Rascunho com 2 perguntas."""
    return await store.save_quiz(
        quiz_record(teacher.id, title="Draft Quiz", is_published=False), question_records()
    )


@pytest_asyncio.fixture
async def student_stats(gateway, student):
    """user_stats do aluno com 100 XP."""
    return await gateway.insert(
        "user_stats", {"user_id": student.id, "xp": 100, "level": 2, "streak": 0}
    )


@pytest.fixture
def make_session(store, notifier, quiz_config, stalled_sleep):
    """Fabrica de QuizSession (encerradas no teardown)."""
    from eduquiz.engine.session import QuizSession

    created = []

    def _make(actor, quiz_id, **kwargs):
        kwargs.setdefault("notifier", notifier)
        kwargs.setdefault("config", quiz_config)
        kwargs.setdefault("sleep", stalled_sleep)
        session = QuizSession(actor, quiz_id, kwargs.pop("store", store), **kwargs)
        created.append(session)
        return session

    yield _make

    for session in created:
        session.close()


# =============================================================================
# FIXTURES DO FASTAPI
# =============================================================================


@pytest.fixture
def seed_tables():
    """Linhas iniciais do gateway usado pela app (sobrescrever por teste)."""
    return {"user_stats": [{"user_id": "student-1", "xp": 100, "level": 2, "streak": 0}]}


@pytest.fixture
def client(seed_tables):
    """Cliente de teste FastAPI com estado global limpo."""
    from fastapi.testclient import TestClient

    import app_state
    from eduquiz.storage.gateway import InMemoryGateway
    from eduquiz.storage.quiz_store import QuizStore
    from server import app

    app_state.reset()
    app_state.gateway = InMemoryGateway(tables=seed_tables)
    app_state.store = QuizStore(app_state.gateway)

    with TestClient(app) as test_client:
        yield test_client

    app_state.reset()


def headers_for(user_id: str, role: str) -> dict[str, str]:
    return {"X-User-Id": user_id, "X-User-Role": role}


@pytest.fixture
def teacher_headers():
    return headers_for("teacher-1", "teacher")


@pytest.fixture
def student_headers():
    return headers_for("student-1", "student")


@pytest.fixture
def parent_headers():
    return headers_for("parent-1", "parent")


@pytest.fixture
def admin_headers():
    return headers_for("admin-1", "admin")
