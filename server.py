"""
EduQuiz Server - Motor de quizzes do LMS

FastAPI server with:
- Quiz authoring (draft/publish) for teachers and admins
- Published catalog and attempt history
- Timed quiz sessions with scoring and XP
- Per-user notification inbox
"""

from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

import app_state  # noqa: E402
from eduquiz import __version__  # noqa: E402
from eduquiz.config import get_config  # noqa: E402
from eduquiz.logger import configure_logging  # noqa: E402
from eduquiz.router import register_error_handlers  # noqa: E402
from eduquiz.router import router as quiz_router  # noqa: E402

# =============================================================================
# LIFECYCLE
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage app lifecycle."""
    config = get_config()
    logger = configure_logging(config.log_level)
    logger.info(f"Starting EduQuiz v{__version__} (backend: {config.storage_backend})")
    yield
    await app_state.cleanup()
    logger.info("EduQuiz stopped")


app = FastAPI(
    title="EduQuiz",
    description="Quiz engine for the LMS: authoring, catalog, timed attempts and XP",
    version=__version__,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
app.include_router(quiz_router)


# =============================================================================
# HEALTH ENDPOINTS
# =============================================================================


@app.get("/")
async def root():
    """Health check."""
    return {
        "status": "ok",
        "message": f"EduQuiz v{__version__}",
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    config = get_config()
    return {
        "status": "healthy",
        "version": __version__,
        "storage_backend": config.storage_backend,
        "timeout_policy": config.timeout_policy.value,
        "active_sessions": app_state.active_session_count(),
    }


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8001)
