from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
from uuid import UUID

from storefront.api.deps import get_services
from storefront.auth.dependencies import get_current_user
from storefront.schemas.auth import MessageResponse
from storefront.schemas.wishlist import (
    Priority,
    WishlistAdd,
    WishlistUpdate,
    WishlistItemResponse,
    WishlistUserStatistics,
    PopularWishlistProduct,
)
from storefront.services.registry import ServiceRegistry
from storefront.services.wishlist_service import WishlistService

router = APIRouter(
    prefix="/users/{user_id}/wishlist",
    tags=["Wishlist"],
    dependencies=[Depends(get_current_user)]
)

admin_router = APIRouter(
    prefix="/wishlist",
    tags=["Wishlist"],
    dependencies=[Depends(get_current_user)]
)


def get_wishlist_service(services: ServiceRegistry = Depends(get_services)) -> WishlistService:
    """Dependency to get wishlist service"""
    return services.wishlist


@router.post(
    "",
    response_model=WishlistItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a product to the wishlist",
    description="`priority` is one of low, medium, high and defaults to medium.",
    responses={
        404: {"description": "User or product not found"},
        409: {"description": "Product already in wishlist"}
    }
)
def add_to_wishlist(
    user_id: UUID,
    item_data: WishlistAdd,
    wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    return wishlist_service.add_to_wishlist(user_id, item_data)


@router.get("", response_model=List[WishlistItemResponse], summary="Get a user's wishlist, newest first")
def get_user_wishlist(
    user_id: UUID,
    priority: Optional[Priority] = Query(None, description="Only items with this priority"),
    wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    return wishlist_service.get_user_wishlist(user_id, priority=priority)


@router.delete("", response_model=MessageResponse, summary="Clear a user's wishlist")
def clear_wishlist(user_id: UUID, wishlist_service: WishlistService = Depends(get_wishlist_service)):
    wishlist_service.clear_user_wishlist(user_id)
    return {"message": "Wishlist cleared successfully"}


@router.get("/statistics", response_model=WishlistUserStatistics, summary="Wishlist size by priority")
def get_wishlist_statistics(user_id: UUID, wishlist_service: WishlistService = Depends(get_wishlist_service)):
    return wishlist_service.get_wishlist_statistics(user_id)


@router.get(
    "/{product_id}",
    response_model=WishlistItemResponse,
    summary="Get one wishlist item",
    responses={404: {"description": "Product not found in wishlist"}}
)
def get_wishlist_item(
    user_id: UUID,
    product_id: UUID,
    wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    return wishlist_service.get_wishlist_item(user_id, product_id)


@router.put("/{product_id}", response_model=WishlistItemResponse, summary="Update priority or notification flag")
def update_wishlist_item(
    user_id: UUID,
    product_id: UUID,
    item_data: WishlistUpdate,
    wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    return wishlist_service.update_wishlist_item(user_id, product_id, item_data)


@router.delete("/{product_id}", response_model=MessageResponse, summary="Remove a product from the wishlist")
def remove_from_wishlist(
    user_id: UUID,
    product_id: UUID,
    wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    wishlist_service.remove_from_wishlist(user_id, product_id)
    return {"message": "Product removed from wishlist successfully"}


@router.post("/{product_id}/move-to-cart", response_model=MessageResponse, summary="Move a wishlist item to the cart")
def move_to_cart(
    user_id: UUID,
    product_id: UUID,
    wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    return wishlist_service.move_to_cart(user_id, product_id)


@admin_router.get("", response_model=List[WishlistItemResponse], summary="List wishlist items of every user")
def get_all_wishlists(
    user_id: Optional[UUID] = Query(None),
    product_id: Optional[UUID] = Query(None),
    priority: Optional[Priority] = Query(None),
    wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    return wishlist_service.get_all_wishlists(user_id=user_id, product_id=product_id, priority=priority)


@admin_router.get("/popular-products", response_model=List[PopularWishlistProduct], summary="Most wishlisted products")
def get_popular_wishlist_products(
    limit: int = Query(10, ge=1, le=100),
    wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    return wishlist_service.get_popular_wishlist_products(limit)
