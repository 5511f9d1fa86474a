from fastapi import APIRouter, Depends, HTTPException

from core.service_factories import get_recommendation_manager
from domain.entities import GroupSession
from managers.recommendation_manager import RecommendationManager
from schemas.recommendation import (
    GroupRecommendationRequest,
    GroupRecommendationResponse,
    MovieItem,
    RecommendationRequest,
    RecommendationResponse,
    UserResultItem,
)

router = APIRouter()


@router.post("/recommend", response_model=RecommendationResponse)
async def recommend(
    request: RecommendationRequest,
    manager: RecommendationManager = Depends(get_recommendation_manager),
):
    result = await manager.recommend_for_input(0, request.input, request.duration)
    if not result.succeeded:
        raise HTTPException(
            status_code=502,
            detail={"stage": result.failed_stage.value if result.failed_stage else None, "error": result.error},
        )
    return RecommendationResponse(movie=MovieItem.from_recommendation(result.recommendation))


@router.post("/recommendations/group", response_model=GroupRecommendationResponse)
async def recommend_group(
    request: GroupRecommendationRequest,
    manager: RecommendationManager = Depends(get_recommendation_manager),
):
    session = GroupSession(request.group)
    for preference in request.users:
        session.add(preference)
    results = await manager.recommend_for_group(session)
    return GroupRecommendationResponse(results=[UserResultItem.from_result(r) for r in results])
