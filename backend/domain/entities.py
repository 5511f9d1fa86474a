from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import orjson
from pydantic import BaseModel, ConfigDict, Field

NO_MOVIES_FOUND_TITLE = "No movies found"
NO_MOVIES_FOUND_CONTENT = "Sorry, no movies found for your query. Please try again."


class Genre(str, Enum):
    CLASSIC = "classic"
    NEW = "new"


class Mood(str, Enum):
    FUN = "fun"
    SERIOUS = "serious"
    INSPIRING = "inspiring"
    SCARY = "scary"


class PipelineStage(str, Enum):
    COLLECTING_PREFERENCES = "collecting_preferences"
    EMBEDDING = "embedding"
    RETRIEVING = "retrieving"
    RECOMMENDING = "recommending"
    RESOLVING_POSTER = "resolving_poster"
    DONE = "done"
    FAILED = "failed"


class UserPreference(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    favorite_movie: str = Field(alias="favoriteMovie", min_length=1)
    genre: Genre
    mood: Mood

    def to_query_text(self) -> str:
        """Minified JSON with the form's field names, as sent to the embedder."""
        return orjson.dumps(self.model_dump(mode="json", by_alias=True)).decode()


class GroupPreferences(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    users_count: int = Field(alias="usersCount", ge=1)
    duration: Optional[int] = Field(default=None, ge=1)


class GroupSession:
    """Collects one preference per person until the group is complete."""

    def __init__(self, group: GroupPreferences):
        self.group = group
        self._preferences: List[UserPreference] = []

    @property
    def preferences(self) -> List[UserPreference]:
        return list(self._preferences)

    @property
    def is_complete(self) -> bool:
        return len(self._preferences) == self.group.users_count

    def add(self, preference: UserPreference) -> int:
        if self.is_complete:
            raise ValueError(f"Group already has {self.group.users_count} preferences")
        self._preferences.append(preference)
        return len(self._preferences) - 1


@dataclass
class Embedding:
    vector: List[float]


@dataclass(frozen=True)
class ContentChunk:
    content: str
    embedding: Embedding
    similarity: Optional[float] = None


@dataclass
class Recommendation:
    title: str
    content: str
    release_year: Optional[int] = None
    poster: Optional[str] = None

    @property
    def is_sentinel(self) -> bool:
        return self.title == NO_MOVIES_FOUND_TITLE

    @classmethod
    def no_movies_found(cls) -> "Recommendation":
        return cls(title=NO_MOVIES_FOUND_TITLE, content=NO_MOVIES_FOUND_CONTENT)


@dataclass
class UserResult:
    index: int
    stage: PipelineStage = PipelineStage.COLLECTING_PREFERENCES
    recommendation: Optional[Recommendation] = None
    error: Optional[str] = None
    failed_stage: Optional[PipelineStage] = None

    @property
    def succeeded(self) -> bool:
        return self.stage == PipelineStage.DONE
