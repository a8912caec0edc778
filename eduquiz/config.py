# =============================================================================
# CONFIGURACAO DO QUIZ ENGINE
# =============================================================================
# Valores lidos de variaveis de ambiente (.env carregado pelo server.py)
# =============================================================================

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

from .models.enums import TimeoutPolicy

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("memory", "supabase")

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int, minimum: int | None = None) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{name} deve ser inteiro, recebido {value!r}") from None
    if minimum is not None and parsed < minimum:
        raise ValueError(f"{name} deve ser >= {minimum}, recebido {parsed}")
    return parsed


def _env_float(name: str, default: float, positive: bool = False) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = float(value)
    except ValueError:
        raise ValueError(f"{name} deve ser numerico, recebido {value!r}") from None
    if positive and not parsed > 0:
        raise ValueError(f"{name} deve ser maior que zero, recebido {parsed}")
    return parsed


@dataclass
class QuizConfig:
    """Configuracao centralizada do motor de quiz.

    Attributes:
        storage_backend: "memory" (dev/testes) ou "supabase"
        supabase_url: URL do projeto Supabase
        supabase_key: Chave de servico/anon usada no PostgREST
        supabase_timeout: Timeout HTTP em segundos
        timeout_policy: Comportamento quando o tempo acaba
        tick_seconds: Intervalo do cronometro (1 tick = 1 segundo de quiz)
        require_answer_in_options: Exigir resposta correta entre as opcoes
        default_duration_minutes: Duracao padrao de um quiz novo
        default_xp_reward: XP padrao de um quiz novo
        option_slots: Quantidade de opcoes vazias em pergunta nova
        session_retention_seconds: Tempo ocioso ate descartar tentativa finalizada
        log_level: Nivel de log do pacote
        cors_origins: Origens liberadas no CORS
    """

    storage_backend: str = "memory"
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_timeout: float = 10.0
    timeout_policy: TimeoutPolicy = TimeoutPolicy.NONE
    tick_seconds: float = 1.0
    require_answer_in_options: bool = True
    default_duration_minutes: int = 15
    default_xp_reward: int = 50
    option_slots: int = 4
    session_retention_seconds: int = 300
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @classmethod
    def from_env(cls) -> "QuizConfig":
        """Cria configuracao a partir das variaveis de ambiente."""
        backend = os.getenv("QUIZ_STORAGE_BACKEND", "memory").strip().lower()
        if backend not in STORAGE_BACKENDS:
            logger.warning(f"QUIZ_STORAGE_BACKEND invalido '{backend}', usando 'memory'")
            backend = "memory"

        policy_raw = os.getenv("QUIZ_TIMEOUT_POLICY", TimeoutPolicy.NONE.value).strip().lower()
        try:
            policy = TimeoutPolicy(policy_raw)
        except ValueError:
            logger.warning(f"QUIZ_TIMEOUT_POLICY invalido '{policy_raw}', usando 'none'")
            policy = TimeoutPolicy.NONE

        origins_raw = os.getenv("CORS_ORIGINS", "")
        origins = [o.strip() for o in origins_raw.split(",") if o.strip()]

        return cls(
            storage_backend=backend,
            supabase_url=os.getenv("SUPABASE_URL", "").rstrip("/"),
            supabase_key=os.getenv("SUPABASE_KEY", ""),
            supabase_timeout=_env_float("SUPABASE_TIMEOUT", 10.0, positive=True),
            timeout_policy=policy,
            tick_seconds=_env_float("QUIZ_TICK_SECONDS", 1.0, positive=True),
            require_answer_in_options=_env_bool("QUIZ_REQUIRE_ANSWER_IN_OPTIONS", True),
            default_duration_minutes=_env_int("QUIZ_DEFAULT_DURATION", 15, minimum=1),
            default_xp_reward=_env_int("QUIZ_DEFAULT_XP", 50, minimum=0),
            option_slots=_env_int("QUIZ_OPTION_SLOTS", 4, minimum=1),
            session_retention_seconds=_env_int("QUIZ_SESSION_RETENTION", 300, minimum=0),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
        )


@lru_cache(maxsize=1)
def get_config() -> QuizConfig:
    """Retorna configuracao (cacheada) do ambiente."""
    return QuizConfig.from_env()


def reset_config() -> None:
    """Limpa cache da configuracao (usado em testes)."""
    get_config.cache_clear()
