from typing import Optional

import structlog
from injector import Injector, singleton
from structlog.stdlib import BoundLogger

from core.settings import Settings, get_settings
from domain.interfaces import (
    IEmbeddingService,
    ILLMService,
    IMovieApiService,
    IVectorStoreRepository,
)
from repositories.vector_store import InMemoryVectorStore, PgvectorRepository
from services.embedding_service import OpenAIEmbeddingService
from services.ingestion_service import CorpusIngestionService
from services.llm_service import OpenAILLMService
from services.tmdb_service import TMDBApiService


def create_injector(settings: Optional[Settings] = None) -> Injector:
    settings = settings or get_settings()
    vector_store = PgvectorRepository if settings.vector_store_backend == "pgvector" else InMemoryVectorStore

    injector = Injector()
    injector.binder.bind(Settings, to=settings, scope=singleton)
    injector.binder.bind(IEmbeddingService, to=OpenAIEmbeddingService, scope=singleton)
    injector.binder.bind(IVectorStoreRepository, to=vector_store, scope=singleton)
    injector.binder.bind(ILLMService, to=OpenAILLMService, scope=singleton)
    injector.binder.bind(IMovieApiService, to=TMDBApiService, scope=singleton)
    injector.binder.bind(CorpusIngestionService, to=CorpusIngestionService, scope=singleton)
    injector.binder.bind(
        BoundLogger, to=structlog.get_logger("popchoice"), scope=singleton
    )
    return injector
