import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from hybrid_coach.api.coach_builder import router as coach_builder_router
from hybrid_coach.coach.mode_coordinator import ModeCoordinator
from hybrid_coach.config.settings import settings
from hybrid_coach.core.logger import setup_logger
from hybrid_coach.services.llm.generation_client import PydanticAIGenerationClient


def create_app(coordinator: ModeCoordinator | None = None) -> FastAPI:
    """Build the FastAPI app around a single coach session.

    Args:
        coordinator: Coordinator to serve. A coordinator backed by the
            configured generation service is created when omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logger(level=settings.log_level, log_file=settings.log_file)

        # Set OPENAI_API_KEY from settings if not already set in environment
        if settings.openai_api_key and not os.getenv("OPENAI_API_KEY"):
            os.environ["OPENAI_API_KEY"] = settings.openai_api_key
            logger.info("Set OPENAI_API_KEY from settings")

        if getattr(app.state, "coordinator", None) is None:
            app.state.coordinator = ModeCoordinator(PydanticAIGenerationClient())
        logger.info("Coach session ready", mode=app.state.coordinator.mode.value)

        yield

        await app.state.coordinator.aclose()
        logger.info("Coach session closed")

    app = FastAPI(title="HybridOne Coach API", version="0.1.0", lifespan=lifespan)
    app.state.coordinator = coordinator
    app.include_router(coach_builder_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
