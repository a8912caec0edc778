"""Quiz Storage - Gateways de persistencia e QuizStore."""

from ..config import QuizConfig
from .gateway import InMemoryGateway, PersistenceGateway
from .quiz_store import QuizStore
from .supabase_gateway import SupabaseGateway


def create_gateway(config: QuizConfig) -> PersistenceGateway:
    """Cria o gateway conforme ``QUIZ_STORAGE_BACKEND``."""
    if config.storage_backend == "supabase":
        return SupabaseGateway(
            config.supabase_url,
            config.supabase_key,
            timeout=config.supabase_timeout,
        )
    return InMemoryGateway()


__all__ = [
    "PersistenceGateway",
    "InMemoryGateway",
    "SupabaseGateway",
    "QuizStore",
    "create_gateway",
]
