"""Quiz Schemas - Registros persistidos e modelos Pydantic de request/response."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import NotificationKind, QuestionType, QuizDifficulty, SessionStatus

# =============================================================================
# REGISTROS (linhas das tabelas)
# =============================================================================


class Quiz(BaseModel):
    """Quiz persistido na tabela ``quizzes``."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="ID atribuido pelo servidor")
    title: str = Field(..., description="Titulo do quiz")
    description: str | None = Field(default=None, description="Descricao opcional")
    subject: str = Field(..., description="Materia (ex: Mathematics)")
    difficulty: QuizDifficulty = Field(default=QuizDifficulty.EASY)
    duration_minutes: int = Field(..., gt=0, description="Duracao em minutos")
    xp_reward: int = Field(default=0, ge=0, description="XP concedido ao concluir")
    created_by: str = Field(..., description="ID do autor")
    is_published: bool = Field(default=False)
    created_at: datetime | None = Field(default=None)

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60


class Question(BaseModel):
    """Pergunta persistida na tabela ``quiz_questions``."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="ID da pergunta")
    quiz_id: str = Field(..., description="Quiz dono da pergunta")
    question_text: str = Field(..., description="Enunciado")
    question_type: QuestionType = Field(default=QuestionType.MULTIPLE_CHOICE)
    correct_answer: str = Field(..., description="Resposta esperada")
    options: list[str] | None = Field(
        default=None, description="Opcoes (apenas multiple_choice)"
    )
    points: int = Field(default=1, ge=1, description="Peso da pergunta")
    order_number: int = Field(..., description="Ordem de apresentacao (1..N)")


class QuizResult(BaseModel):
    """Resultado imutavel de uma tentativa (tabela ``quiz_results``)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    quiz_id: str | None = None
    subject: str
    score: int = Field(..., ge=0, le=100, description="Percentual 0-100")
    total_questions: int = Field(..., ge=0)
    time_taken_seconds: int = Field(..., ge=0)
    completed_at: datetime | None = None


class UserStats(BaseModel):
    """Acumulador por usuario (tabela ``user_stats``)."""

    model_config = ConfigDict(extra="ignore")

    user_id: str
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1)
    streak: int = Field(default=0)


# =============================================================================
# RESULTADOS DO MOTOR
# =============================================================================


class ScoreResult(BaseModel):
    """Saida do motor de pontuacao."""

    score_percent: int = Field(..., ge=0, le=100)
    raw_points: int = Field(..., ge=0)
    total_points: int = Field(..., gt=0)
    correct_answers: int = Field(..., ge=0)
    total_questions: int = Field(..., ge=0)


class SubmissionOutcome(BaseModel):
    """Resumo exibido ao usuario apos o envio."""

    result: QuizResult
    score: ScoreResult
    xp_awarded: int = Field(..., ge=0)
    new_xp: int | None = Field(default=None, description="XP total apos o credito")


# =============================================================================
# REQUEST / RESPONSE
# =============================================================================


class QuestionPayload(BaseModel):
    """Pergunta enviada pelo formulario de autoria."""

    question_text: str = Field(default="")
    question_type: QuestionType = Field(default=QuestionType.MULTIPLE_CHOICE)
    correct_answer: str = Field(default="")
    options: list[str] | None = Field(default=None)
    points: int = Field(default=1)


class QuizPayload(BaseModel):
    """Formulario completo de autoria (metadados + perguntas)."""

    title: str = Field(default="")
    description: str | None = Field(default=None)
    subject: str = Field(default="")
    difficulty: QuizDifficulty = Field(default=QuizDifficulty.EASY)
    duration_minutes: int | None = Field(default=None, description="Padrao: config")
    xp_reward: int | None = Field(default=None, description="Padrao: config")
    questions: list[QuestionPayload] = Field(default_factory=list)
    publish: bool = Field(default=False, description="Publicar ou salvar rascunho")


class QuizDetailResponse(BaseModel):
    """Visao do autor: quiz com gabarito."""

    quiz: Quiz
    questions: list[Question]


class PublicQuestion(BaseModel):
    """Pergunta como exibida durante a tentativa (sem gabarito)."""

    id: str
    question_text: str
    question_type: QuestionType
    options: list[str] | None = None
    points: int
    order_number: int

    @classmethod
    def from_question(cls, question: Question) -> "PublicQuestion":
        return cls(
            id=question.id,
            question_text=question.question_text,
            question_type=question.question_type,
            options=question.options,
            points=question.points,
            order_number=question.order_number,
        )


class StartSessionRequest(BaseModel):
    """Request para iniciar tentativa."""

    quiz_id: str = Field(..., description="ID do quiz escolhido no catalogo")


class AnswerRequest(BaseModel):
    """Resposta capturada para uma pergunta."""

    value: str = Field(..., description="Texto/opcao escolhida")


class SessionView(BaseModel):
    """Estado da tentativa retornado ao cliente."""

    session_id: str
    quiz_id: str
    title: str
    status: SessionStatus
    current_index: int
    total_questions: int
    remaining_seconds: int
    progress: float = Field(0.0, description="Fracao de perguntas ja exibidas (0-1)")
    is_last: bool = False
    submitting: bool = False
    input_locked: bool = False
    answers: dict[str, str] = Field(default_factory=dict)
    current_question: PublicQuestion | None = None
    outcome: SubmissionOutcome | None = None


class NotificationView(BaseModel):
    """Notificacao pendente para o usuario."""

    kind: NotificationKind
    message: str
    created_at: datetime
