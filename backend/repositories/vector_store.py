from typing import List, Sequence

import numpy as np
from injector import inject
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.future import select
from structlog.stdlib import BoundLogger

from core.settings import Settings
from db.engine import create_engine, create_schema, create_session_factory
from db.models import MovieChunk
from domain.entities import ContentChunk, Embedding
from domain.exceptions import ConfigurationError, IngestError, RetrievalError
from domain.interfaces import IVectorStoreRepository
from utils.similarity import cosine_similarities, top_matches


def _check_query(match_count: int) -> None:
    if match_count < 1:
        raise ValueError("match_count must be at least 1")


class PgvectorRepository(IVectorStoreRepository):
    """Movie chunks in PostgreSQL, ranked by pgvector cosine distance."""

    @inject
    def __init__(self, settings: Settings, logger: BoundLogger):
        if not settings.pgvector_url:
            raise ConfigurationError("PGVECTOR_URL is required for the pgvector store")
        self.engine = create_engine(settings.pgvector_url)
        self.session_factory = create_session_factory(self.engine)
        self.dimensions = settings.embedding_dimensions
        self.logger = logger

    async def create_schema(self) -> None:
        await create_schema(self.engine)

    async def ingest(self, chunks: Sequence[ContentChunk]) -> None:
        wrong_size = [i for i, c in enumerate(chunks) if len(c.embedding.vector) != self.dimensions]
        if wrong_size:
            raise IngestError(f"Chunks {wrong_size} do not have {self.dimensions} dimensions")
        rows = [MovieChunk(content=c.content, embedding=c.embedding.vector) for c in chunks]
        try:
            async with self.session_factory() as session:
                session.add_all(rows)
                await session.commit()
        except SQLAlchemyError as e:
            self.logger.error("Chunk insert rejected", chunks_count=len(rows), error=str(e))
            raise IngestError(f"Failed to insert chunks: {e}") from e
        self.logger.info("Chunks inserted", chunks_count=len(rows))

    async def is_empty(self) -> bool:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(MovieChunk.id).limit(1))
                return result.first() is None
        except SQLAlchemyError as e:
            raise RetrievalError(f"Failed to probe movies table: {e}") from e

    async def nearest(self, query: Embedding, match_count: int, match_threshold: float) -> List[ContentChunk]:
        _check_query(match_count)
        distance = MovieChunk.embedding.cosine_distance(query.vector)
        stmt = (
            select(MovieChunk.content, MovieChunk.embedding, distance.label("distance"))
            .where(distance <= 1 - match_threshold)
            .order_by(distance)
            .limit(match_count)
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                rows = result.all()
        except SQLAlchemyError as e:
            self.logger.error("Similarity search failed", error=str(e))
            raise RetrievalError(f"Similarity search failed: {e}") from e

        return [
            ContentChunk(
                content=row.content,
                embedding=Embedding(vector=[float(x) for x in row.embedding]),
                similarity=1 - float(row.distance),
            )
            for row in rows
        ]


class InMemoryVectorStore(IVectorStoreRepository):
    """Process-local store for development and tests; same cosine ranking as pgvector."""

    @inject
    def __init__(self, logger: BoundLogger):
        self.logger = logger
        self._chunks: List[ContentChunk] = []
        self._matrix = np.empty((0, 0))

    async def ingest(self, chunks: Sequence[ContentChunk]) -> None:
        if not chunks:
            return
        dims = {len(c.embedding.vector) for c in chunks}
        if self._chunks:
            dims.add(self._matrix.shape[1])
        if len(dims) != 1:
            raise IngestError(f"Inconsistent embedding dimensions: {sorted(dims)}")
        new_rows = np.array([c.embedding.vector for c in chunks], dtype=float)
        self._matrix = np.vstack([self._matrix, new_rows]) if self._chunks else new_rows
        self._chunks.extend(chunks)
        self.logger.info("Chunks inserted", chunks_count=len(chunks), total=len(self._chunks))

    async def is_empty(self) -> bool:
        return not self._chunks

    async def nearest(self, query: Embedding, match_count: int, match_threshold: float) -> List[ContentChunk]:
        _check_query(match_count)
        if not self._chunks:
            return []
        if len(query.vector) != self._matrix.shape[1]:
            raise RetrievalError(
                f"Query has {len(query.vector)} dimensions, store has {self._matrix.shape[1]}"
            )
        similarities = cosine_similarities(query.vector, self._matrix)
        return [
            ContentChunk(
                content=self._chunks[i].content,
                embedding=self._chunks[i].embedding,
                similarity=float(similarities[i]),
            )
            for i in top_matches(similarities, match_count, match_threshold)
        ]
