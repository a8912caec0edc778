"""Quiz Authoring - Montagem e gravacao de quizzes (metadados + perguntas)."""

from __future__ import annotations

import logging
from typing import Any

from ..config import QuizConfig, get_config
from ..exceptions import AuthorizationError, QuizError, QuizNotFoundError, QuizValidationError
from ..identity import Actor, require_author
from ..models.enums import TRUE_FALSE_ANSWERS, NotificationKind, QuestionType, QuizDifficulty
from ..models.schemas import Question, QuestionPayload, Quiz, QuizPayload
from ..models.state import QuestionDraft, QuizDraft
from ..notifications import LoggingNotifier, Notifier
from ..storage.quiz_store import QuizStore

logger = logging.getLogger(__name__)

CATALOG_REDIRECT = "catalog"

QUESTION_FIELDS = ("question_text", "question_type", "correct_answer", "options", "points")

# Campos de texto obrigatorios (None ou outro tipo = erro de validacao)
TEXT_FIELDS = ("title", "subject", "question_text", "correct_answer")
INT_FIELDS = ("duration_minutes", "xp_reward", "points")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _check_type(name: str, value: Any) -> None:
    """Rejeita valores de tipo errado antes de irem para o rascunho."""
    if name in TEXT_FIELDS and not isinstance(value, str):
        problem = f"{name}: expected text, got {type(value).__name__}"
    elif name == "description" and value is not None and not isinstance(value, str):
        problem = f"{name}: expected text, got {type(value).__name__}"
    elif name in INT_FIELDS and not _is_int(value):
        problem = f"{name}: expected integer, got {type(value).__name__}"
    elif name == "options" and value is not None and (
        not isinstance(value, (list, tuple)) or not all(isinstance(o, str) for o in value)
    ):
        problem = f"{name}: expected a list of text"
    else:
        return
    raise QuizValidationError(f"Valor inválido para {name}", details={"errors": [problem]})


class QuizAuthor:
    """Formulario de autoria de um quiz.

    Mantem o rascunho em memoria (metadados + lista ordenada de perguntas)
    e grava tudo de uma vez em ``save()``. Erros de validacao nao chegam
    ao gateway; erros de persistencia preservam o rascunho para nova
    tentativa.

    Example:
        >>> author = QuizAuthor(teacher, store)
        >>> author.set_details(title="Algebra Basics", subject="Mathematics")
        >>> q = author.questions[0]
        >>> author.update_question(q.id, "question_type", "true_false")
        >>> author.update_question(q.id, "correct_answer", "True")
        >>> quiz = await author.save(publish=True)
    """

    def __init__(
        self,
        actor: Actor,
        store: QuizStore,
        notifier: Notifier | None = None,
        config: QuizConfig | None = None,
    ):
        self.actor = require_author(actor)
        self.store = store
        self.notifier = notifier or LoggingNotifier()
        self.config = config or get_config()

        self.draft = QuizDraft(
            duration_minutes=self.config.default_duration_minutes,
            xp_reward=self.config.default_xp_reward,
        )
        self.questions: list[QuestionDraft] = [QuestionDraft.blank(self.config.option_slots)]
        self.quiz_id: str | None = None
        self.published = False
        self.redirect: str | None = None
        self.saving = False

    # =========================================================================
    # CONSTRUTORES ALTERNATIVOS
    # =========================================================================

    @classmethod
    def from_payload(
        cls,
        actor: Actor,
        store: QuizStore,
        payload: QuizPayload,
        notifier: Notifier | None = None,
        config: QuizConfig | None = None,
    ) -> "QuizAuthor":
        """Monta rascunho a partir do formulario enviado pela API."""
        author = cls(actor, store, notifier=notifier, config=config)
        author.apply_payload(payload)
        return author

    @classmethod
    async def edit(
        cls,
        actor: Actor,
        store: QuizStore,
        quiz_id: str,
        notifier: Notifier | None = None,
        config: QuizConfig | None = None,
    ) -> "QuizAuthor":
        """Carrega quiz existente para edicao (dono ou admin)."""
        author = cls(actor, store, notifier=notifier, config=config)
        quiz, questions = await author.fetch(quiz_id)

        author.quiz_id = quiz.id
        author.published = quiz.is_published
        author.draft = QuizDraft(
            title=quiz.title,
            description=quiz.description,
            subject=quiz.subject,
            difficulty=quiz.difficulty,
            duration_minutes=quiz.duration_minutes,
            xp_reward=quiz.xp_reward,
        )
        author.questions = [author._draft_from_question(q) for q in questions]
        return author

    def apply_payload(self, payload: QuizPayload) -> None:
        """Substitui metadados e perguntas do rascunho pelo formulario."""
        details: dict[str, Any] = {
            "title": payload.title,
            "description": payload.description,
            "subject": payload.subject,
            "difficulty": payload.difficulty,
        }
        if payload.duration_minutes is not None:
            details["duration_minutes"] = payload.duration_minutes
        if payload.xp_reward is not None:
            details["xp_reward"] = payload.xp_reward
        self.set_details(**details)
        self.questions = [self._draft_from_payload(q) for q in payload.questions]

    async def fetch(self, quiz_id: str) -> tuple[Quiz, list[Question]]:
        """Quiz com gabarito, apenas para o dono (ou admin)."""
        quiz = await self._load_owned(quiz_id)
        return quiz, await self.store.get_questions(quiz.id)

    def _draft_from_payload(self, payload: QuestionPayload) -> QuestionDraft:
        options = payload.options
        if payload.question_type is QuestionType.MULTIPLE_CHOICE and options is None:
            options = [""] * self.config.option_slots
        elif payload.question_type is not QuestionType.MULTIPLE_CHOICE:
            options = None
        return QuestionDraft(
            question_text=payload.question_text,
            question_type=payload.question_type,
            correct_answer=payload.correct_answer,
            options=list(options) if options is not None else None,
            points=payload.points,
        )

    @staticmethod
    def _draft_from_question(question: Question) -> QuestionDraft:
        return QuestionDraft(
            question_text=question.question_text,
            question_type=question.question_type,
            correct_answer=question.correct_answer,
            options=list(question.options) if question.options is not None else None,
            points=question.points,
        )

    async def _load_owned(self, quiz_id: str) -> Quiz:
        quiz = await self.store.get_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(f"Quiz {quiz_id} não encontrado", details={"quiz_id": quiz_id})
        if not self.actor.view.can_manage(self.actor.id, quiz.created_by):
            raise AuthorizationError(
                "Apenas o autor pode alterar este quiz",
                details={"quiz_id": quiz_id, "user_id": self.actor.id},
            )
        return quiz

    # =========================================================================
    # EDICAO EM MEMORIA
    # =========================================================================

    def set_details(self, **fields: Any) -> QuizDraft:
        """Atualiza metadados do rascunho (title, subject, difficulty, ...)."""
        unknown = [name for name in fields if name not in QuizDraft.EDITABLE_FIELDS]
        if unknown:
            raise QuizValidationError(
                "Campo desconhecido no quiz",
                details={"errors": [f"unknown field: {name}" for name in unknown]},
            )

        for name, value in fields.items():
            if name == "difficulty" and not isinstance(value, QuizDifficulty):
                try:
                    value = QuizDifficulty(value)
                except ValueError:
                    raise QuizValidationError(
                        "Dificuldade inválida",
                        details={"errors": [f"difficulty: {value!r}"]},
                    ) from None
            else:
                _check_type(name, value)
            setattr(self.draft, name, value)
        return self.draft

    def _find(self, question_id: str) -> QuestionDraft:
        for question in self.questions:
            if question.id == question_id:
                return question
        raise QuizNotFoundError(
            f"Pergunta {question_id} não encontrada no rascunho",
            details={"question_id": question_id},
        )

    def add_question(self) -> QuestionDraft:
        """Adiciona pergunta vazia de multipla escolha no final."""
        question = QuestionDraft.blank(self.config.option_slots)
        self.questions.append(question)
        logger.debug(f"Pergunta {len(self.questions)} adicionada ao rascunho")
        return question

    def remove_question(self, question_id: str) -> None:
        """Remove uma pergunta; as demais mantem a ordem relativa."""
        question = self._find(question_id)
        self.questions.remove(question)

    def update_question(self, question_id: str, field: str, value: Any) -> QuestionDraft:
        """Altera um campo de uma pergunta do rascunho."""
        if field not in QUESTION_FIELDS:
            raise QuizValidationError(
                "Campo desconhecido na pergunta",
                details={"errors": [f"unknown field: {field}"]},
            )
        question = self._find(question_id)

        if field == "question_type":
            try:
                value = QuestionType(value)
            except ValueError:
                raise QuizValidationError(
                    "Tipo de pergunta inválido",
                    details={"errors": [f"question_type: {value!r}"]},
                ) from None
            self._apply_type(question, value)
            return question

        _check_type(field, value)
        if field == "options" and value is not None:
            value = list(value)
        setattr(question, field, value)
        return question

    def _apply_type(self, question: QuestionDraft, new_type: QuestionType) -> None:
        question.question_type = new_type
        if new_type is QuestionType.MULTIPLE_CHOICE:
            if not question.options:
                question.options = [""] * self.config.option_slots
        else:
            question.options = None
        if new_type is QuestionType.TRUE_FALSE and question.correct_answer not in TRUE_FALSE_ANSWERS:
            question.correct_answer = ""

    def update_option(self, question_id: str, index: int, value: str) -> QuestionDraft:
        """Altera o texto de uma opcao de multipla escolha."""
        question = self._find(question_id)
        if question.question_type is not QuestionType.MULTIPLE_CHOICE or question.options is None:
            raise QuizValidationError(
                "Pergunta não é de múltipla escolha",
                details={"errors": [f"question {question_id}: options only for multiple_choice"]},
            )
        if not 0 <= index < len(question.options):
            raise QuizValidationError(
                "Opção inexistente",
                details={"errors": [f"question {question_id}: option index {index} out of range"]},
            )
        question.options[index] = value
        return question

    # =========================================================================
    # VALIDACAO E GRAVACAO
    # =========================================================================

    def validate(self) -> list[str]:
        """Lista problemas do rascunho (vazia = pode gravar)."""
        errors = []
        draft = self.draft

        if not _text(draft.title):
            errors.append("title is required")
        if not _text(draft.subject):
            errors.append("subject is required")
        if not _is_int(draft.duration_minutes) or draft.duration_minutes <= 0:
            errors.append("duration_minutes must be a positive integer")
        if not _is_int(draft.xp_reward) or draft.xp_reward < 0:
            errors.append("xp_reward must be a non-negative integer")
        if not self.questions:
            errors.append("at least one question is required")

        for position, question in enumerate(self.questions, start=1):
            errors.extend(self._validate_question(position, question))

        return errors

    def _validate_question(self, position: int, question: QuestionDraft) -> list[str]:
        errors = []
        prefix = f"question {position}"
        answer = _text(question.correct_answer)

        if not _text(question.question_text):
            errors.append(f"{prefix}: text is required")
        if not _is_int(question.points) or question.points < 1:
            errors.append(f"{prefix}: points must be a positive integer")
        if not answer:
            errors.append(f"{prefix}: correct answer is required")

        if question.question_type is QuestionType.TRUE_FALSE:
            if answer and answer not in TRUE_FALSE_ANSWERS:
                errors.append(f"{prefix}: answer must be True or False")
        elif question.question_type is QuestionType.MULTIPLE_CHOICE:
            options = question.cleaned_options()
            if not options:
                errors.append(f"{prefix}: multiple choice needs options")
            elif answer and self.config.require_answer_in_options and answer not in options:
                errors.append(f"{prefix}: correct answer must be one of the options")

        return errors

    async def save(self, publish: bool) -> Quiz:
        """Valida e grava quiz + perguntas.

        Args:
            publish: True publica; False salva como rascunho

        Returns:
            Quiz salvo

        Raises:
            QuizValidationError: Rascunho incompleto (nenhuma chamada ao gateway)
            PersistenceError: Falha ao gravar (rascunho preservado)
        """
        errors = self.validate()
        if errors:
            logger.info(f"Rascunho inválido ({len(errors)} problemas): {errors}")
            self.notifier.notify(NotificationKind.ERROR, "Please fill in all required fields")
            raise QuizValidationError("Rascunho do quiz inválido", details={"errors": errors})

        if self.saving:
            raise QuizError("Gravação já em andamento")

        quiz_record = self.draft.to_record(self.actor.id, published=publish)
        if self.quiz_id is not None:
            # Autor original permanece (admin pode editar quiz de outro)
            quiz_record.pop("created_by")
        question_records = [
            question.to_record(None, order_number)
            for order_number, question in enumerate(self.questions, start=1)
        ]

        self.saving = True
        try:
            quiz, _questions = await self.store.save_quiz(
                quiz_record, question_records, quiz_id=self.quiz_id
            )
        except QuizError as e:
            logger.error(f"Falha ao gravar quiz: {e}")
            self.notifier.notify(NotificationKind.ERROR, "Failed to save quiz")
            raise
        finally:
            self.saving = False

        self.quiz_id = quiz.id
        self.published = quiz.is_published
        self.redirect = CATALOG_REDIRECT
        self.notifier.notify(
            NotificationKind.SUCCESS,
            "Quiz published successfully!" if publish else "Quiz saved as draft!",
        )
        return quiz

    async def set_published(self, quiz_id: str, published: bool) -> Quiz:
        """Alterna rascunho/publicado de um quiz ja gravado."""
        quiz = await self._load_owned(quiz_id)

        if published:
            questions = await self.store.get_questions(quiz.id)
            if not questions:
                self.notifier.notify(NotificationKind.ERROR, "Add at least one question before publishing")
                raise QuizValidationError(
                    "Quiz sem perguntas não pode ser publicado",
                    details={"errors": ["at least one question is required"]},
                )

        try:
            updated = await self.store.set_published(quiz.id, published)
        except QuizError:
            self.notifier.notify(NotificationKind.ERROR, "Failed to update quiz")
            raise

        self.notifier.notify(
            NotificationKind.SUCCESS,
            "Quiz published successfully!" if published else "Quiz moved to drafts",
        )
        return updated
