# =============================================================================
# TESTES - Quiz Scoring Engine
# =============================================================================
# Testes unitarios para motor de pontuacao (percentual, normalizacao)
# =============================================================================

import pytest


def make_question(qid: str, answer: str, points: int = 1, qtype: str = "short_answer"):
    from eduquiz.models.schemas import Question

    return Question(
        id=qid,
        quiz_id="quiz-1",
        question_text=f"Question {qid}",
        question_type=qtype,
        correct_answer=answer,
        points=points,
        order_number=1,
    )


class TestAnswerNormalization:
    """Testes para comparacao de respostas."""

    def test_trims_and_ignores_case(self):
        """Verifica que ' paris ' bate com 'Paris'."""
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        engine = QuizScoringEngine()
        question = make_question("q1", "Paris")

        assert engine.evaluate_answer(question, " paris ") is True
        assert engine.evaluate_answer(question, "PARIS") is True

    def test_wrong_answer(self):
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        engine = QuizScoringEngine()

        assert engine.evaluate_answer(make_question("q1", "Paris"), "Lyon") is False

    def test_missing_answer_never_correct(self):
        """Verifica que pergunta sem resposta nao pontua."""
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        engine = QuizScoringEngine()

        assert engine.evaluate_answer(make_question("q1", "Paris"), None) is False

    def test_true_false_case_insensitive(self):
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        engine = QuizScoringEngine()
        question = make_question("q1", "True", qtype="true_false")

        assert engine.evaluate_answer(question, "true") is True
        assert engine.evaluate_answer(question, "False") is False


class TestCalculateScore:
    """Testes para calculo do percentual."""

    def test_all_correct(self):
        """2 perguntas de 1 ponto, ambas corretas -> 100%."""
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        engine = QuizScoringEngine()
        questions = [make_question("q1", "Paris"), make_question("q2", "True")]

        result = engine.calculate_score(questions, {"q1": "Paris", "q2": "True"})

        assert result.score_percent == 100
        assert result.raw_points == 2
        assert result.total_points == 2
        assert result.correct_answers == 2
        assert result.total_questions == 2

    def test_one_of_four(self):
        """4 perguntas, 1 correta -> 25%."""
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        engine = QuizScoringEngine()
        questions = [make_question(f"q{i}", "A") for i in range(1, 5)]

        result = engine.calculate_score(questions, {"q1": "A", "q2": "B", "q3": "C"})

        assert result.score_percent == 25
        assert result.correct_answers == 1

    def test_weighted_points(self):
        """Pontos diferentes por pergunta pesam no percentual."""
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        engine = QuizScoringEngine()
        questions = [make_question("q1", "A", points=3), make_question("q2", "B", points=1)]

        result = engine.calculate_score(questions, {"q1": "A"})

        assert result.raw_points == 3
        assert result.total_points == 4
        assert result.score_percent == 75

    def test_no_answers_scores_zero(self):
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        engine = QuizScoringEngine()

        result = engine.calculate_score([make_question("q1", "A")], {})

        assert result.score_percent == 0
        assert result.correct_answers == 0

    def test_rounds_half_up(self):
        """1/8 = 12.5% -> 13 (nao arredonda para par)."""
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        engine = QuizScoringEngine()
        questions = [make_question(f"q{i}", "A") for i in range(8)]

        result = engine.calculate_score(questions, {"q0": "A"})

        assert result.score_percent == 13

    def test_rounds_thirds(self):
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        assert QuizScoringEngine.percentage(1, 3) == 33
        assert QuizScoringEngine.percentage(2, 3) == 67

    def test_answers_for_unknown_questions_ignored(self):
        from eduquiz.engine.scoring_engine import QuizScoringEngine

        engine = QuizScoringEngine()

        result = engine.calculate_score([make_question("q1", "A")], {"other": "A"})

        assert result.score_percent == 0


class TestScoringErrors:
    """Testes para quiz sem pontos."""

    def test_empty_quiz_raises(self):
        """Verifica ScoringError quando total de pontos e zero."""
        from eduquiz.engine.scoring_engine import QuizScoringEngine
        from eduquiz.exceptions import ScoringError

        engine = QuizScoringEngine()

        with pytest.raises(ScoringError) as exc_info:
            engine.calculate_score([], {})

        assert exc_info.value.details["total_points"] == 0

    def test_percentage_rejects_zero_total(self):
        from eduquiz.engine.scoring_engine import QuizScoringEngine
        from eduquiz.exceptions import ScoringError

        with pytest.raises(ScoringError):
            QuizScoringEngine.percentage(0, 0)
