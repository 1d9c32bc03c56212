"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from cao_engine.api.middleware import RequestTimingMiddleware
from cao_engine.api.routes_health import router as health_router
from cao_engine.api.routes_search import router as search_router
from cao_engine.config.settings import Settings
from cao_engine.discovery.source_discovery import SourceDiscovery
from cao_engine.generation.candidate_generator import CandidateGenerator
from cao_engine.generation.gemini_provider import GeminiProvider
from cao_engine.generation.personalizer import Personalizer
from cao_engine.observability.logger import get_logger, setup_logging
from cao_engine.pipeline.orchestrator import SearchOrchestrator
from cao_engine.storage.sqlite_document_store import SQLiteDocumentStore
from cao_engine.verification.executor import VerificationExecutor
from cao_engine.verification.hooks.factory import create_hook_registry

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()
    setup_logging(settings.log_level, settings.log_json)

    # Completion service
    llm = GeminiProvider(
        api_key=settings.google_api_key,
        model=settings.gemini_model,
        grounded_model=settings.gemini_grounded_model,
        temperature=settings.gemini_temperature,
        max_tokens=settings.gemini_max_tokens,
    )

    # Verification
    registry = create_hook_registry(settings)
    executor = VerificationExecutor(registry)

    # Source discovery
    discovery = None
    if settings.discovery_enabled:
        Path(settings.discovery_db_path).parent.mkdir(parents=True, exist_ok=True)
        discovery = SourceDiscovery(
            llm=llm,
            store=SQLiteDocumentStore(settings.discovery_db_path),
            settings=settings,
        )
        await discovery.initialize()

    orchestrator = SearchOrchestrator(
        generator=CandidateGenerator(llm=llm, settings=settings),
        executor=executor,
        personalizer=Personalizer(llm=llm, settings=settings),
        settings=settings,
        discovery=discovery,
    )

    # Attach to app state
    app.state.orchestrator = orchestrator
    app.state.hook_registry = registry
    app.state.discovery = discovery
    app.state.settings = settings

    logger.info(
        "startup_complete",
        hooks=registry.names(),
        discovery=discovery is not None,
        pending_sources=discovery.pending_count() if discovery else 0,
    )

    yield

    # Shutdown: flush discovery state and close provider clients
    if discovery is not None:
        await discovery.aclose()
    await registry.aclose()
    logger.info("shutdown_complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title="CAO Engine",
        version="1.0.0",
        description="Verified, personalized recommendations from generated candidates",
        lifespan=lifespan,
    )
    app.add_middleware(RequestTimingMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(search_router, tags=["search"])
    return app
