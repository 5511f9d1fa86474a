from pathlib import Path
from typing import Any, Dict, List

import orjson
from injector import inject
from langchain_text_splitters import RecursiveCharacterTextSplitter
from structlog.stdlib import BoundLogger

from core.settings import Settings
from domain.entities import ContentChunk
from domain.exceptions import IngestError
from domain.interfaces import IEmbeddingService, IVectorStoreRepository


def load_corpus(path: str) -> List[Dict[str, Any]]:
    """Read a JSON list of {"title", "content"} movie entries."""
    try:
        data = orjson.loads(Path(path).read_bytes())
    except orjson.JSONDecodeError as e:
        raise IngestError(f"Corpus {path} is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise IngestError(f"Corpus {path} must be a JSON list of movies")
    return data


class CorpusIngestionService:
    @inject
    def __init__(
        self,
        settings: Settings,
        embedder: IEmbeddingService,
        vectorstore: IVectorStoreRepository,
        logger: BoundLogger,
    ):
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
        )
        self.embedder = embedder
        self.vectorstore = vectorstore
        self.logger = logger

    def build_chunks(self, movies: List[Dict[str, Any]]) -> List[str]:
        parts = []
        for movie in movies:
            title = movie.get("title", "")
            content = movie.get("content", "")
            parts.extend([title, f"({content})", content])
        return self.splitter.split_text(" ".join(parts))

    async def seed(self, movies: List[Dict[str, Any]]) -> int:
        """Chunk, embed and store the corpus, only when the store is empty."""
        if not await self.vectorstore.is_empty():
            self.logger.info("Vector store already seeded, skipping ingestion")
            return 0

        self.logger.info("Vector store is empty, seeding corpus", movies_count=len(movies))
        texts = self.build_chunks(movies)
        if not texts:
            self.logger.warning("Corpus produced no chunks")
            return 0
        embeddings = await self.embedder.embed_many(texts)
        chunks = [ContentChunk(content=text, embedding=embedding) for text, embedding in zip(texts, embeddings)]
        await self.vectorstore.ingest(chunks)
        self.logger.info("Corpus seeded", chunks_count=len(chunks))
        return len(chunks)
