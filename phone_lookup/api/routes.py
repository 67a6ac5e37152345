import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from phone_lookup.dependencies import get_post_loader, get_resolver
from phone_lookup.domain.models import LookupPayload
from phone_lookup.metrics import REQUESTS_TOTAL
from phone_lookup.posts import PostLoader
from phone_lookup.resolver import LookupResolver

from .schemas import ErrorResponse, HealthResponse, PostResponse, PostSummaryResponse

logger = logging.getLogger(__name__)

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.get(
    "/lookup",
    response_model=LookupPayload,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def lookup(
    number: Optional[str] = Query(None, description="Phone number in any common format"),
    resolver: LookupResolver = Depends(get_resolver),
) -> LookupPayload:
    REQUESTS_TOTAL.labels(endpoint="/lookup").inc()
    if number is None or not number.strip():
        raise HTTPException(status_code=400, detail='Query parameter "number" is required')
    return await resolver.lookup(number.strip())


@router.get("/posts", response_model=List[PostSummaryResponse], response_model_exclude_none=True)
def list_posts(loader: PostLoader = Depends(get_post_loader)) -> List[PostSummaryResponse]:
    REQUESTS_TOTAL.labels(endpoint="/posts").inc()
    return [PostSummaryResponse(**p.to_dict()) for p in loader.list_posts()]


@router.get(
    "/posts/{slug}",
    response_model=PostResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
def get_post(slug: str, loader: PostLoader = Depends(get_post_loader)) -> PostResponse:
    REQUESTS_TOTAL.labels(endpoint="/posts/{slug}").inc()
    return PostResponse(**loader.get_post(slug).to_dict())


@router.get("/healthz", response_model=HealthResponse)
async def healthz(resolver: LookupResolver = Depends(get_resolver)) -> HealthResponse:
    REQUESTS_TOTAL.labels(endpoint="/healthz").inc()
    cache_ok = await resolver.cache.ping()
    return HealthResponse(status="ok", cache="ok" if cache_ok else "unavailable")
