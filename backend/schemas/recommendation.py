from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from domain.entities import GroupPreferences, Recommendation, UserPreference, UserResult


class RecommendationRequest(BaseModel):
    input: str = Field(min_length=1)
    duration: Optional[int] = Field(default=None, ge=1)


class MovieItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    content: str
    release_year: Optional[int] = Field(default=None, serialization_alias="releaseYear")
    poster: Optional[str] = None

    @classmethod
    def from_recommendation(cls, recommendation: Recommendation) -> "MovieItem":
        return cls(
            title=recommendation.title,
            content=recommendation.content,
            release_year=recommendation.release_year,
            poster=recommendation.poster,
        )


class RecommendationResponse(BaseModel):
    movie: MovieItem


class GroupRecommendationRequest(BaseModel):
    group: GroupPreferences
    users: List[UserPreference]

    @model_validator(mode="after")
    def check_users_count(self):
        if len(self.users) != self.group.users_count:
            raise ValueError(f"Expected {self.group.users_count} user preferences, got {len(self.users)}")
        return self


class UserResultItem(BaseModel):
    index: int
    status: Literal["ok", "failed"]
    movie: Optional[MovieItem] = None
    stage: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: UserResult) -> "UserResultItem":
        if result.succeeded:
            return cls(index=result.index, status="ok", movie=MovieItem.from_recommendation(result.recommendation))
        return cls(
            index=result.index,
            status="failed",
            stage=result.failed_stage.value if result.failed_stage else None,
            error=result.error,
        )


class GroupRecommendationResponse(BaseModel):
    results: List[UserResultItem]
