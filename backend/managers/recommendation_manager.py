import asyncio
from typing import Awaitable, List, Optional, Type, TypeVar

from structlog.stdlib import BoundLogger

from core.settings import Settings
from domain.entities import GroupSession, PipelineStage, UserPreference, UserResult
from domain.exceptions import (
    EmbeddingError,
    PopChoiceError,
    RecommendationError,
    RetrievalError,
)
from domain.interfaces import (
    IEmbeddingService,
    ILLMService,
    IMovieApiService,
    IVectorStoreRepository,
)

T = TypeVar("T")


class RecommendationManager:
    """Runs embed → retrieve → recommend → poster for each user of a group."""

    def __init__(
        self,
        embedder: IEmbeddingService,
        vectorstore: IVectorStoreRepository,
        llm: ILLMService,
        tmdb: IMovieApiService,
        settings: Settings,
        logger: BoundLogger,
    ):
        self.embedder = embedder
        self.vectorstore = vectorstore
        self.llm = llm
        self.tmdb = tmdb
        self.match_count = settings.match_count
        self.match_threshold = settings.match_threshold
        self.stage_timeout = settings.stage_timeout_seconds
        self.logger = logger

    async def recommend_for_group(self, session: GroupSession) -> List[UserResult]:
        """Fan out one independent run per user; returns exactly one slot per user, by index."""
        if not session.is_complete:
            raise ValueError(
                f"Expected {session.group.users_count} preferences, got {len(session.preferences)}"
            )
        preferences = session.preferences
        duration = session.group.duration
        self.logger.info("Starting group recommendation", users_count=len(preferences), duration=duration)

        results = await asyncio.gather(
            *[self.recommend_for_user(index, preference, duration) for index, preference in enumerate(preferences)]
        )

        failed = [r.index for r in results if not r.succeeded]
        self.logger.info(
            "Group recommendation completed",
            users_count=len(results),
            succeeded=len(results) - len(failed),
            failed_indices=failed,
        )
        return list(results)

    async def recommend_for_user(
        self, index: int, preference: UserPreference, duration: Optional[int] = None
    ) -> UserResult:
        return await self.recommend_for_input(index, preference.to_query_text(), duration)

    async def recommend_for_input(self, index: int, input_text: str, duration: Optional[int] = None) -> UserResult:
        """Single-user pipeline. Hard errors end in a failed slot instead of propagating."""
        result = UserResult(index=index)
        logger = self.logger.bind(user_index=index)
        try:
            result.stage = PipelineStage.EMBEDDING
            query = await self._run_stage(self.embedder.embed(input_text), EmbeddingError, "embedding")

            result.stage = PipelineStage.RETRIEVING
            matches = await self._run_stage(
                self.vectorstore.nearest(query, self.match_count, self.match_threshold),
                RetrievalError,
                "retrieval",
            )
            context = matches[0].content if matches else ""
            logger.info("Context retrieved", matches=len(matches), top_similarity=matches[0].similarity if matches else None)

            result.stage = PipelineStage.RECOMMENDING
            recommendation = await self._run_stage(
                self.llm.recommend(input_text, context, duration), RecommendationError, "recommendation"
            )

            result.stage = PipelineStage.RESOLVING_POSTER
            if not recommendation.is_sentinel:
                recommendation.poster = await self._resolve_poster(recommendation.title, logger)

            result.recommendation = recommendation
            result.stage = PipelineStage.DONE
            logger.info(
                "User pipeline completed",
                title=recommendation.title,
                sentinel=recommendation.is_sentinel,
                has_poster=recommendation.poster is not None,
            )
        except PopChoiceError as e:
            self._mark_failed(result, e)
            logger.warning("User pipeline failed", stage=result.failed_stage.value, error=result.error)
        except Exception as e:
            self._mark_failed(result, e)
            logger.exception("User pipeline failed unexpectedly", stage=result.failed_stage.value)
        return result

    async def _run_stage(self, call: Awaitable[T], error_type: Type[PopChoiceError], name: str) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.stage_timeout)
        except asyncio.TimeoutError as e:
            raise error_type(f"{name} timed out after {self.stage_timeout}s") from e

    async def _resolve_poster(self, title: str, logger: BoundLogger) -> Optional[str]:
        try:
            return await asyncio.wait_for(self.tmdb.resolve_poster(title), timeout=self.stage_timeout)
        except asyncio.TimeoutError:
            logger.warning("Poster lookup timed out", title=title)
            return None

    @staticmethod
    def _mark_failed(result: UserResult, error: Exception) -> None:
        result.failed_stage = result.stage
        result.stage = PipelineStage.FAILED
        result.error = str(error) or type(error).__name__
