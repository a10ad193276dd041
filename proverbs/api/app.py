"""FastAPI application"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from proverbs import __version__
from proverbs.auth import JWTHandler
from proverbs.embedding import EmbeddingProvider, EmbeddingProviderFactory
from proverbs.ingestion import IngestionPipeline
from proverbs.items import ItemService
from proverbs.retrieval import RetrievalEngine
from proverbs.shared.config import AppConfig, load_config
from proverbs.shared.logging_setup import configure_logging
from proverbs.storage import VectorStore, build_store

from .routes import router


def wire_services(app: FastAPI, config: AppConfig, store: VectorStore, embedder: EmbeddingProvider) -> None:
    """Attach the store and the services built on it to app.state."""
    app.state.store = store
    app.state.embedder = embedder
    app.state.item_service = ItemService(store, config)
    app.state.retrieval_engine = RetrievalEngine(store, config)
    app.state.ingestion_pipeline = IngestionPipeline(store, embedder, config)


def create_app(
    config: Optional[AppConfig] = None,
    store: Optional[VectorStore] = None,
    embedder: Optional[EmbeddingProvider] = None,
) -> FastAPI:
    """Build the application.

    A store and embedder passed in are wired immediately and left open on
    shutdown; otherwise both are built from config when the app starts.
    """
    config = config or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(config.log_level)
        owns_store = store is None
        if getattr(app.state, "store", None) is None:
            wire_services(
                app,
                config,
                store or build_store(config),
                embedder or EmbeddingProviderFactory.create(config),
            )
        logger.info(f"Proverbs API started (store={app.state.store.backend_name})")
        try:
            yield
        finally:
            if owns_store:
                app.state.store.close()
                app.state.store = None
            logger.info("Proverbs API stopped")

    app = FastAPI(
        title="Proverbs",
        description="Verse storage with text and vector similarity search",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.jwt_handler = JWTHandler(config.jwt_secret_key, config.jwt_algorithm)
    if store is not None and embedder is not None:
        wire_services(app, config, store, embedder)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")
    return app


app = create_app()
