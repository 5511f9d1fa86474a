from fastapi_injector import Injected
from structlog.stdlib import BoundLogger

from core.settings import Settings
from domain.interfaces import (
    IEmbeddingService,
    ILLMService,
    IMovieApiService,
    IVectorStoreRepository,
)
from managers.recommendation_manager import RecommendationManager


def get_recommendation_manager(
    embedder: IEmbeddingService = Injected(IEmbeddingService),
    vectorstore: IVectorStoreRepository = Injected(IVectorStoreRepository),
    llm: ILLMService = Injected(ILLMService),
    tmdb: IMovieApiService = Injected(IMovieApiService),
    settings: Settings = Injected(Settings),
    logger: BoundLogger = Injected(BoundLogger),
) -> RecommendationManager:
    return RecommendationManager(
        embedder=embedder,
        vectorstore=vectorstore,
        llm=llm,
        tmdb=tmdb,
        settings=settings,
        logger=logger,
    )
