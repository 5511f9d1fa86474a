from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest
from structlog.stdlib import BoundLogger

from core.settings import Settings
from domain.entities import (
    ContentChunk,
    Embedding,
    Genre,
    GroupPreferences,
    GroupSession,
    Mood,
    Recommendation,
    UserPreference,
)
from domain.interfaces import (
    IEmbeddingService,
    ILLMService,
    IMovieApiService,
    IVectorStoreRepository,
)
from managers.recommendation_manager import RecommendationManager

HEIST_CHUNK = (
    "Ocean's Eleven: 2001 | PG-13 | 1h 56m (Danny Ocean and his ten accomplices plan to rob "
    "three Las Vegas casinos simultaneously in a playful, stylish heist comedy.)"
)
POSTER_URL = "https://image.tmdb.org/t/p/w500/hQQCdZrsHtZyR6NbKH2YyCqd2fR.jpg"


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        openai_api_key="test-openai-key",
        tmdb_api_key="test-tmdb-token",
        vector_store_backend="memory",
        chat_model="gpt-4o",
        stage_timeout_seconds=1.0,
    )


@pytest.fixture
def mock_logger() -> BoundLogger:
    """Create a mock logger for testing."""
    logger = MagicMock(spec=BoundLogger)
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    logger.bind = MagicMock(return_value=logger)
    return logger


@pytest.fixture
def mock_embedding_service() -> IEmbeddingService:
    service = MagicMock(spec=IEmbeddingService)
    service.embed = AsyncMock(return_value=Embedding([0.1, 0.2, 0.3, 0.4, 0.5] * 100))
    return service


@pytest.fixture
def mock_vector_store() -> IVectorStoreRepository:
    repository = AsyncMock(spec=IVectorStoreRepository)
    repository.nearest = AsyncMock(
        return_value=[
            ContentChunk(
                content=HEIST_CHUNK,
                embedding=Embedding([0.1, 0.2, 0.3, 0.4, 0.5] * 100),
                similarity=0.82,
            )
        ]
    )
    return repository


@pytest.fixture
def mock_llm_service() -> ILLMService:
    service = MagicMock(spec=ILLMService)

    async def recommend(input_text, context, duration_minutes=None):
        # Fresh object per call, the manager enriches it in place
        return Recommendation(
            title="Ocean's Eleven",
            content="A charming crew pulls off an audacious triple casino heist in Las Vegas.",
            release_year=2001,
        )

    service.recommend = AsyncMock(side_effect=recommend)
    return service


@pytest.fixture
def mock_tmdb_service() -> IMovieApiService:
    service = MagicMock(spec=IMovieApiService)
    service.resolve_poster = AsyncMock(return_value=POSTER_URL)
    return service


@pytest.fixture
def recommendation_manager(
    mock_embedding_service: IEmbeddingService,
    mock_vector_store: IVectorStoreRepository,
    mock_llm_service: ILLMService,
    mock_tmdb_service: IMovieApiService,
    test_settings: Settings,
    mock_logger: BoundLogger,
) -> RecommendationManager:
    """Create a recommendation manager with all mocked dependencies."""
    return RecommendationManager(
        embedder=mock_embedding_service,
        vectorstore=mock_vector_store,
        llm=mock_llm_service,
        tmdb=mock_tmdb_service,
        settings=test_settings,
        logger=mock_logger,
    )


@pytest.fixture
def sample_preferences() -> List[UserPreference]:
    return [
        UserPreference(
            favorite_movie="Ocean's Eleven because the crew is charming and the heist is clever",
            genre=Genre.NEW,
            mood=Mood.FUN,
        ),
        UserPreference(
            favorite_movie="Heat because the bank robbery shootout is the most intense scene ever filmed",
            genre=Genre.CLASSIC,
            mood=Mood.SERIOUS,
        ),
        UserPreference(
            favorite_movie="The Shawshank Redemption because it taught me to never give up hope",
            genre=Genre.CLASSIC,
            mood=Mood.INSPIRING,
        ),
    ]


@pytest.fixture
def group_session(sample_preferences) -> GroupSession:
    session = GroupSession(GroupPreferences(users_count=len(sample_preferences), duration=120))
    for preference in sample_preferences:
        session.add(preference)
    return session
