# =============================================================================
# TESTES - Quiz Schemas Module
# =============================================================================
# Testes unitarios para schemas Pydantic e estado em memoria
# =============================================================================

import pytest
from pydantic import ValidationError


class TestQuizRecord:
    """Testes para Quiz."""

    def test_ignores_unknown_columns(self):
        from eduquiz.models.schemas import Quiz

        quiz = Quiz(
            id="q1",
            title="Algebra",
            subject="Mathematics",
            duration_minutes=15,
            created_by="t1",
            updated_at="2025-01-01T00:00:00Z",
        )

        assert quiz.duration_seconds == 900
        assert not hasattr(quiz, "updated_at")

    def test_rejects_zero_duration(self):
        from eduquiz.models.schemas import Quiz

        with pytest.raises(ValidationError):
            Quiz(id="q1", title="A", subject="B", duration_minutes=0, created_by="t1")

    def test_difficulty_values(self):
        from eduquiz.models.enums import QuizDifficulty
        from eduquiz.models.schemas import Quiz

        quiz = Quiz(
            id="q1", title="A", subject="B", duration_minutes=5, created_by="t1", difficulty="Hard"
        )

        assert quiz.difficulty is QuizDifficulty.HARD


class TestQuestionRecords:
    """Testes para Question e PublicQuestion."""

    def test_points_must_be_positive(self):
        from eduquiz.models.schemas import Question

        with pytest.raises(ValidationError):
            Question(
                id="x", quiz_id="q1", question_text="?", correct_answer="a",
                points=0, order_number=1,
            )

    def test_public_question_hides_answer(self):
        from eduquiz.models.schemas import PublicQuestion, Question

        question = Question(
            id="x",
            quiz_id="q1",
            question_text="Capital?",
            correct_answer="Paris",
            options=["Paris", "Lyon"],
            order_number=1,
        )

        public = PublicQuestion.from_question(question)

        assert "correct_answer" not in public.model_dump()
        assert public.options == ["Paris", "Lyon"]

    def test_result_score_range(self):
        from eduquiz.models.schemas import QuizResult

        with pytest.raises(ValidationError):
            QuizResult(
                id="r1", user_id="u1", subject="Math", score=101,
                total_questions=1, time_taken_seconds=1,
            )


class TestDrafts:
    """Testes para QuestionDraft/QuizDraft."""

    def test_question_record_strips_and_drops_blank_options(self):
        from eduquiz.models.state import QuestionDraft

        draft = QuestionDraft(
            question_text="  Capital?  ",
            correct_answer=" Paris ",
            options=["Paris", " ", "Lyon", ""],
        )

        record = draft.to_record("q1", 3)

        assert record == {
            "question_text": "Capital?",
            "question_type": "multiple_choice",
            "correct_answer": "Paris",
            "options": ["Paris", "Lyon"],
            "points": 1,
            "order_number": 3,
            "quiz_id": "q1",
        }

    def test_non_multiple_choice_has_no_options(self):
        from eduquiz.models.enums import QuestionType
        from eduquiz.models.state import QuestionDraft

        draft = QuestionDraft(question_type=QuestionType.TRUE_FALSE, options=["x"])

        assert draft.to_record(None, 1)["options"] is None
        assert "quiz_id" not in draft.to_record(None, 1)

    def test_blank_question(self):
        from eduquiz.models.state import QuestionDraft

        assert QuestionDraft.blank(3).options == ["", "", ""]
        assert QuestionDraft.blank().id != QuestionDraft.blank().id

    def test_quiz_record(self):
        from eduquiz.models.state import QuizDraft

        record = QuizDraft(title=" Algebra ", subject="Math", description="  ").to_record(
            "t1", published=True
        )

        assert record["title"] == "Algebra"
        assert record["description"] is None
        assert record["difficulty"] == "Easy"
        assert record["created_by"] == "t1"
        assert record["is_published"] is True


class TestSessionState:
    """Testes para SessionState."""

    def test_dict_round_trip(self):
        from eduquiz.models.enums import SessionStatus
        from eduquiz.models.state import SessionState

        state = SessionState(
            session_id="s1",
            quiz_id="q1",
            user_id="u1",
            status=SessionStatus.ACTIVE,
            remaining_seconds=120,
            answers={"a": "b"},
        )

        restored = SessionState.from_dict(state.to_dict())

        assert restored == state
        assert state.to_dict()["status"] == "active"
