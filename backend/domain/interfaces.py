from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .entities import ContentChunk, Embedding, Recommendation


class IEmbeddingService(ABC):
    @abstractmethod
    async def embed(self, text: str) -> Embedding:
        pass

    @abstractmethod
    async def embed_many(self, texts: List[str]) -> List[Embedding]:
        pass


class IVectorStoreRepository(ABC):
    @abstractmethod
    async def ingest(self, chunks: Sequence[ContentChunk]) -> None:
        pass

    @abstractmethod
    async def is_empty(self) -> bool:
        pass

    @abstractmethod
    async def nearest(
        self, query: Embedding, match_count: int, match_threshold: float
    ) -> List[ContentChunk]:
        pass


class ILLMService(ABC):
    @abstractmethod
    async def recommend(
        self, input_text: str, context: str, duration_minutes: Optional[int] = None
    ) -> Recommendation:
        pass


class IMovieApiService(ABC):
    @abstractmethod
    async def resolve_poster(self, title: str) -> Optional[str]:
        pass
