"""FastAPI application: wiring of state, persistence and routers."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rentledger import __version__
from rentledger.api.admin import router as admin_router
from rentledger.api.tenant import router as tenant_router
from rentledger.config import get_app_config
from rentledger.services.analysis_service import AnalysisService
from rentledger.services.db import create_engine_for_url, create_session_factory, create_tables
from rentledger.services.state_service import StateRepository
from rentledger.services.store import KeyValueStore, SqlKeyValueStore

logger = logging.getLogger(__name__)


def create_app(
    store: KeyValueStore | None = None,
    analysis_service: AnalysisService | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        store: Key-value store to use; defaults to the configured database
        analysis_service: AI collaborator; defaults to the configured Ollama client
    """
    config = get_app_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        kv_store = store
        if kv_store is None:
            engine = create_engine_for_url(config.database_url)
            await create_tables(engine)
            kv_store = SqlKeyValueStore(create_session_factory(engine))
            logger.info("Using database store at %s", config.database_url.split("@")[-1])

        repository = StateRepository(kv_store)
        state = await repository.load()
        await repository.save(state)

        app.state.repository = repository
        app.state.ledger_state = state
        app.state.analysis_service = analysis_service or AnalysisService()

        try:
            yield
        finally:
            try:
                await repository.save(app.state.ledger_state)
                logger.info("State saved on shutdown")
            finally:
                if engine is not None:
                    await engine.dispose()

    app = FastAPI(
        title="Rent Ledger",
        description="Monthly utility readings, room bills and payment evidence",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint for monitoring."""
        return {"status": "ok"}

    app.include_router(tenant_router)
    app.include_router(admin_router)
    return app


__all__ = ["create_app"]
