from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
from uuid import UUID

from storefront.api.deps import get_services
from storefront.auth.dependencies import get_current_user
from storefront.schemas.auth import MessageResponse
from storefront.schemas.review import ReviewCreate, ReviewUpdate, ReviewResponse, RatingStats, TopRatedProduct
from storefront.services.review_service import ReviewService
from storefront.services.registry import ServiceRegistry

router = APIRouter(
    tags=["Reviews"],
    dependencies=[Depends(get_current_user)]
)

admin_router = APIRouter(
    prefix="/admin/reviews",
    tags=["Reviews Admin"],
    dependencies=[Depends(get_current_user)]
)


def get_review_service(services: ServiceRegistry = Depends(get_services)) -> ReviewService:
    """Dependency to get review service"""
    return services.reviews


class ReviewFilters:
    """Query parameters shared by the review listings"""

    def __init__(
        self,
        rating: Optional[int] = Query(None, ge=1, le=5, description="Only reviews with this rating"),
        limit: Optional[int] = Query(None, ge=1, description="Maximum number of reviews"),
        offset: Optional[int] = Query(None, ge=0, description="Number of reviews to skip")
    ):
        self.rating = rating
        self.limit = limit
        self.offset = offset


@router.post(
    "/products/{product_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a product",
    description="""
    Add a review for a product. Each user can review a product once; a
    deleted review still counts. The product's average rating is updated
    after the review is stored.
    """,
    responses={
        404: {"description": "User or product not found"},
        409: {"description": "User has already reviewed this product"}
    }
)
def create_review(
    product_id: UUID,
    review_data: ReviewCreate,
    review_service: ReviewService = Depends(get_review_service)
):
    return review_service.create_review(product_id, review_data)


@router.get("/products/{product_id}/reviews", response_model=List[ReviewResponse], summary="List reviews of a product")
def get_product_reviews(
    product_id: UUID,
    user_id: Optional[UUID] = Query(None, description="Only reviews by this user"),
    filters: ReviewFilters = Depends(),
    review_service: ReviewService = Depends(get_review_service)
):
    return review_service.get_product_reviews(
        product_id,
        rating=filters.rating,
        user_id=user_id,
        limit=filters.limit,
        offset=filters.offset
    )


@router.get("/products/{product_id}/reviews/stats", response_model=RatingStats, summary="Rating breakdown of a product")
def get_product_rating_stats(product_id: UUID, review_service: ReviewService = Depends(get_review_service)):
    return review_service.get_product_rating_stats(product_id)


@router.get(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Get review by ID",
    responses={404: {"description": "Review not found"}}
)
def get_review(review_id: UUID, review_service: ReviewService = Depends(get_review_service)):
    return review_service.get_review_by_id(review_id)


@router.put(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Update your review",
    responses={
        403: {"description": "You can only update your own reviews"},
        404: {"description": "Review not found"}
    }
)
def update_review(
    review_id: UUID,
    review_data: ReviewUpdate,
    current_user: dict = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
):
    return review_service.update_review(review_id, review_data, user_id=current_user["user_id"])


@router.delete(
    "/reviews/{review_id}",
    response_model=MessageResponse,
    summary="Delete your review",
    responses={
        403: {"description": "You can only delete your own reviews"},
        404: {"description": "Review not found"}
    }
)
def delete_review(
    review_id: UUID,
    current_user: dict = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
):
    review_service.delete_review(review_id, user_id=current_user["user_id"])
    return {"message": "Review deleted successfully"}


@router.get("/users/{user_id}/reviews", response_model=List[ReviewResponse], summary="List reviews written by a user")
def get_user_reviews(
    user_id: UUID,
    product_id: Optional[UUID] = Query(None, description="Only reviews of this product"),
    filters: ReviewFilters = Depends(),
    review_service: ReviewService = Depends(get_review_service)
):
    return review_service.get_user_reviews(
        user_id,
        rating=filters.rating,
        product_id=product_id,
        limit=filters.limit,
        offset=filters.offset
    )


@admin_router.get("", response_model=List[ReviewResponse], summary="List all active reviews")
def get_all_reviews(
    user_id: Optional[UUID] = Query(None, description="Only reviews by this user"),
    product_id: Optional[UUID] = Query(None, description="Only reviews of this product"),
    filters: ReviewFilters = Depends(),
    review_service: ReviewService = Depends(get_review_service)
):
    return review_service.get_all_reviews(
        rating=filters.rating,
        user_id=user_id,
        product_id=product_id,
        limit=filters.limit,
        offset=filters.offset
    )


@admin_router.get("/statistics", response_model=RatingStats, summary="Rating breakdown across all reviews")
def get_review_statistics(review_service: ReviewService = Depends(get_review_service)):
    return review_service.get_review_statistics()


@admin_router.get("/top-rated-products", response_model=List[TopRatedProduct], summary="Best rated products")
def get_top_rated_products(
    limit: int = Query(10, ge=1, le=100),
    review_service: ReviewService = Depends(get_review_service)
):
    return review_service.get_top_rated_products(limit)


@admin_router.delete(
    "/{review_id}/force",
    response_model=MessageResponse,
    summary="Delete any review",
    description="Soft deletes the review without checking its author."
)
def force_delete_review(review_id: UUID, review_service: ReviewService = Depends(get_review_service)):
    review_service.delete_review(review_id)
    return {"message": "Review force deleted successfully"}
