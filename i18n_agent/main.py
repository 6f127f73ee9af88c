"""FastAPI application for the translation assistant."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from i18n_agent import __version__
from i18n_agent.api.endpoints import router
from i18n_agent.config import get_config
from i18n_agent.utils.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)

API_TAGS = [
    {
        "name": "Chat",
        "description": "Stream the assistant's reply. The client resends the full conversation on every request.",
    },
    {"name": "Health", "description": "Liveness check."},
]


@asynccontextmanager
async def lifespan(_app: FastAPI):
    config = get_config()
    logger.info(
        f"i18n assistant {__version__} starting - model: {config.model}, "
        f"{config.calls_per_minute} calls/min, max_iterations: {config.max_iterations}, "
        f"write confirmation: {'on' if config.enforce_write_confirmation else 'off'}"
    )
    yield
    logger.info("i18n assistant stopped")


def create_app() -> FastAPI:
    """Build the application with its routes and middleware."""
    application = FastAPI(
        title="i18n Translation Assistant",
        description=(
            "Looks up and creates i18n translations through a conversational agent. "
            "Nothing is written before the user confirms a preview."
        ),
        version=__version__,
        openapi_tags=API_TAGS,
        lifespan=lifespan,
    )

    origins = [origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if origin.strip()]
    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    application.include_router(router)
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "i18n_agent.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level="info",
    )
