from fastapi import APIRouter, Depends
from typing import Any, Dict
from enum import Enum

from storefront.api.deps import get_statistics_service
from storefront.auth.dependencies import get_current_user
from storefront.schemas.auth import MessageResponse
from storefront.statistics.cache import StatsTopic
from storefront.statistics.service import StatisticsService

router = APIRouter(
    prefix="/stats",
    tags=["Statistics"],
    dependencies=[Depends(get_current_user)]
)

CACHED_NOTE = """
    Served from the statistics cache when present (`cached: true`), otherwise
    computed and cached. `generated_at` is when the report was computed.
"""


@router.get("/users", response_model=Dict[str, Any], summary="User statistics", description=CACHED_NOTE)
async def get_user_statistics(stats: StatisticsService = Depends(get_statistics_service)):
    return await stats.get_user_statistics()


@router.get("/products", response_model=Dict[str, Any], summary="Product statistics", description=CACHED_NOTE)
async def get_product_statistics(stats: StatisticsService = Depends(get_statistics_service)):
    return await stats.get_product_statistics()


@router.get("/purchases", response_model=Dict[str, Any], summary="Purchase and revenue statistics", description=CACHED_NOTE)
async def get_purchase_statistics(stats: StatisticsService = Depends(get_statistics_service)):
    return await stats.get_purchase_statistics()


@router.get("/review", response_model=Dict[str, Any], summary="Review statistics", description=CACHED_NOTE)
async def get_review_statistics(stats: StatisticsService = Depends(get_statistics_service)):
    return await stats.get_review_statistics()


@router.get("/wishlist", response_model=Dict[str, Any], summary="Wishlist statistics", description=CACHED_NOTE)
async def get_wishlist_statistics(stats: StatisticsService = Depends(get_statistics_service)):
    return await stats.get_wishlist_statistics()


@router.get("/categories", response_model=Dict[str, Any], summary="Category statistics", description=CACHED_NOTE)
async def get_category_statistics(stats: StatisticsService = Depends(get_statistics_service)):
    return await stats.get_category_statistics()


@router.get(
    "/overview",
    response_model=Dict[str, Any],
    summary="Platform overview",
    description="""
    Headline totals plus every other report, computed side by side.
    Cached separately from the individual reports.
    """
)
async def get_overall_statistics(stats: StatisticsService = Depends(get_statistics_service)):
    return await stats.get_overall_statistics()


# Cache management

class InvalidationTopic(str, Enum):
    USERS = "users"
    PRODUCTS = "products"
    PURCHASES = "purchases"
    REVIEWS = "reviews"
    WISHLIST = "wishlist"
    CATEGORIES = "categories"


INVALIDATION_LABELS = {
    InvalidationTopic.USERS: "User",
    InvalidationTopic.PRODUCTS: "Product",
    InvalidationTopic.PURCHASES: "Purchase",
    InvalidationTopic.REVIEWS: "Review",
    InvalidationTopic.WISHLIST: "Wishlist",
    InvalidationTopic.CATEGORIES: "Category",
}


@router.post(
    "/cache/invalidate/all",
    response_model=MessageResponse,
    summary="Invalidate every statistics cache"
)
async def invalidate_all_statistics(stats: StatisticsService = Depends(get_statistics_service)):
    await stats.invalidate_all()
    return {"message": "All statistics cache invalidated successfully"}


@router.post(
    "/cache/invalidate/{topic}",
    response_model=MessageResponse,
    summary="Invalidate one statistics cache",
    description="The overview cache is always invalidated as well.",
    responses={422: {"description": "Unknown topic"}}
)
async def invalidate_statistics(
    topic: InvalidationTopic,
    stats: StatisticsService = Depends(get_statistics_service)
):
    await stats.invalidate(StatsTopic(topic.value))
    return {"message": f"{INVALIDATION_LABELS[topic]} statistics cache invalidated successfully"}
