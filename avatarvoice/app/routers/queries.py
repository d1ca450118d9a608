"""Search and usage statistics endpoints."""

from fastapi import APIRouter, Query

from avatarvoice.app.dependencies import RepositoryDep
from avatarvoice.app.schemas import SearchResponse, StatsResponse, VoiceMatchResponse

router = APIRouter(prefix="/api/v1", tags=["queries"])


@router.get("/search", response_model=SearchResponse)
async def search(repository: RepositoryDep, q: str = "") -> SearchResponse:
    return SearchResponse.from_result(repository.search(q))


@router.get("/stats", response_model=StatsResponse)
async def stats(repository: RepositoryDep) -> StatsResponse:
    return StatsResponse.from_stats(repository.stats(), repository.category_counts())


@router.get("/stats/most-used", response_model=list[VoiceMatchResponse])
async def most_used(
    repository: RepositoryDep, limit: int = Query(default=10, ge=1, le=100)
) -> list[VoiceMatchResponse]:
    return [VoiceMatchResponse.from_match(m) for m in repository.most_used(limit)]


@router.get("/stats/recently-used", response_model=list[VoiceMatchResponse])
async def recently_used(
    repository: RepositoryDep, limit: int = Query(default=10, ge=1, le=100)
) -> list[VoiceMatchResponse]:
    return [VoiceMatchResponse.from_match(m) for m in repository.recently_used(limit)]
