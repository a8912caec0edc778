# =============================================================================
# CONFTEST - Pytest Fixtures Globais
# =============================================================================
# Ambiente isolado: backend em memoria, configuracao recarregada por teste
# =============================================================================

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Adicionar root ao path
sys.path.insert(0, str(Path(__file__).parent))


# =============================================================================
# FIXTURES DE AMBIENTE
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_env():
    """Configura variáveis de ambiente para testes."""
    from eduquiz.config import reset_config

    env_vars = {
        "QUIZ_STORAGE_BACKEND": "memory",
        "QUIZ_TIMEOUT_POLICY": "none",
        "LOG_LEVEL": "ERROR",
    }
    with patch.dict(os.environ, env_vars):
        reset_config()
        yield
    reset_config()


@pytest.fixture
def capture_logs(caplog):
    """Captura logs durante testes."""
    import logging

    caplog.set_level(logging.DEBUG, logger="eduquiz")
    return caplog
