import asyncio
from typing import List, Optional

import openai
from injector import inject
from structlog.stdlib import BoundLogger

from core.settings import Settings
from domain.entities import Embedding
from domain.exceptions import EmbeddingError
from domain.interfaces import IEmbeddingService


class OpenAIEmbeddingService(IEmbeddingService):
    @inject
    def __init__(self, settings: Settings, logger: BoundLogger):
        self.client = openai.AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.request_timeout_seconds,
            max_retries=0,
        )
        self.model = settings.embedding_model
        self.logger = logger

    async def embed(self, text: str) -> Embedding:
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")
        embeddings = await self._create_embeddings([text])
        return embeddings[0]

    async def embed_many(self, texts: List[str]) -> List[Embedding]:
        if any(not t or not t.strip() for t in texts):
            raise EmbeddingError("Cannot embed empty text")
        batches = self._get_batches(texts)
        results = await asyncio.gather(*[self._create_embeddings(batch) for batch in batches])
        embeddings = [embedding for batch in results for embedding in batch]
        self.logger.info("Embedded texts", texts_count=len(texts), batches_count=len(batches))
        return embeddings

    def _get_batches(self, texts: List[str], batch_size: int = 100) -> List[List[str]]:
        return [texts[start : start + batch_size] for start in range(0, len(texts), batch_size)]

    async def _create_embeddings(self, texts: List[str]) -> List[Embedding]:
        try:
            response = await self.client.embeddings.create(
                model=self.model,
                input=texts,
                encoding_format="float",
            )
        except openai.OpenAIError as e:
            self.logger.error("Embedding request failed", model=self.model, inputs=len(texts), error=str(e))
            raise EmbeddingError(f"Embedding provider error: {e}") from e

        # Response items are index-correlated with the inputs, not necessarily ordered
        results: List[Optional[Embedding]] = [None] * len(texts)
        for item in response.data:
            results[item.index] = Embedding(vector=list(item.embedding))
        missing = [i for i, result in enumerate(results) if result is None]
        if missing:
            raise EmbeddingError(f"Embedding provider returned no vector for inputs {missing}")
        return results
