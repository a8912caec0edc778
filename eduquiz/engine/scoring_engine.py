"""Quiz Scoring Engine - Motor de pontuacao."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from ..exceptions import ScoringError
from ..models.schemas import Question, ScoreResult


class QuizScoringEngine:
    """Motor de pontuação para quizzes.

    Funcao pura: nao faz I/O, nao guarda estado entre chamadas.

    Regras:
        - Cada pergunta soma ``points`` ao total
        - Resposta correta quando, apos strip + casefold, e igual ao gabarito
        - Perguntas sem resposta nunca pontuam
        - Percentual = round(100 * obtidos / total), arredondando .5 para cima

    Example:
        >>> engine = QuizScoringEngine()
        >>> result = engine.calculate_score(questions, {"q1": " paris "})
        >>> result.score_percent
        100
    """

    @staticmethod
    def normalize_answer(value: str | None) -> str:
        """Normaliza resposta para comparacao (espacos e caixa)."""
        return (value or "").strip().casefold()

    def evaluate_answer(self, question: Question, answer: str | None) -> bool:
        """Avalia uma resposta individual.

        Args:
            question: Pergunta respondida
            answer: Valor enviado (None = sem resposta)

        Returns:
            True se a resposta bate com o gabarito
        """
        if answer is None:
            return False
        return self.normalize_answer(answer) == self.normalize_answer(question.correct_answer)

    @staticmethod
    def percentage(raw_points: int, total_points: int) -> int:
        """Percentual inteiro com arredondamento half-up."""
        if total_points <= 0:
            raise ScoringError(
                "Quiz sem pontos para calcular resultado",
                details={"total_points": total_points},
            )
        ratio = Decimal(raw_points * 100) / Decimal(total_points)
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def calculate_score(
        self, questions: list[Question], answers: Mapping[str, str]
    ) -> ScoreResult:
        """Calcula pontuação completa do quiz.

        Args:
            questions: Lista de perguntas do quiz
            answers: Respostas capturadas (question_id -> valor)

        Returns:
            ScoreResult com percentual, pontos obtidos e total

        Raises:
            ScoringError: Se o total de pontos for zero
        """
        raw_points = 0
        total_points = 0
        correct_count = 0

        for question in questions:
            total_points += question.points
            if self.evaluate_answer(question, answers.get(question.id)):
                raw_points += question.points
                correct_count += 1

        return ScoreResult(
            score_percent=self.percentage(raw_points, total_points),
            raw_points=raw_points,
            total_points=total_points,
            correct_answers=correct_count,
            total_questions=len(questions),
        )
