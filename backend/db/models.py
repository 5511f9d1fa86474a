from pgvector.sqlalchemy import Vector
from sqlalchemy import Column, Integer, Text

from core.settings import get_settings
from db.base import Base


class MovieChunk(Base):
    __tablename__ = "movies"
    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    embedding = Column(Vector(get_settings().embedding_dimensions), nullable=False)
