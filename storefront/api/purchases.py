from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
from uuid import UUID

from storefront.api.deps import get_services
from storefront.auth.dependencies import get_current_user
from storefront.schemas.auth import MessageResponse
from storefront.schemas.purchase import PurchaseCreate, PurchaseResponse
from storefront.services.purchase_service import PurchaseService
from storefront.services.registry import ServiceRegistry

router = APIRouter(
    prefix="/purchases",
    tags=["Purchases"],
    dependencies=[Depends(get_current_user)]
)


def get_purchase_service(services: ServiceRegistry = Depends(get_services)) -> PurchaseService:
    """Dependency to get purchase service"""
    return services.purchases


@router.post(
    "",
    response_model=PurchaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Purchase a product",
    description="""
    Record a completed purchase.

    The price is copied from the product at purchase time and never changes
    afterwards. The product's purchase counter is incremented.
    """,
    responses={
        400: {"description": "User or product not found, or product not available for purchase"},
        401: {"description": "Authentication required"}
    }
)
def create_purchase(purchase_data: PurchaseCreate, purchase_service: PurchaseService = Depends(get_purchase_service)):
    return purchase_service.create(purchase_data)


@router.get("", response_model=List[PurchaseResponse], summary="List purchases, newest first")
def list_purchases(
    user_id: Optional[UUID] = Query(None, description="Only purchases made by this user"),
    purchase_service: PurchaseService = Depends(get_purchase_service)
):
    return purchase_service.find_all(user_id=user_id)


@router.get(
    "/{purchase_id}",
    response_model=PurchaseResponse,
    summary="Get purchase by ID",
    responses={404: {"description": "Purchase not found"}}
)
def get_purchase(purchase_id: UUID, purchase_service: PurchaseService = Depends(get_purchase_service)):
    return purchase_service.find_one(purchase_id)


@router.delete(
    "/{purchase_id}",
    response_model=MessageResponse,
    summary="Cancel a purchase",
    description="Purchases are never deleted; a completed purchase is marked cancelled.",
    responses={
        400: {"description": "Purchase is already cancelled"},
        404: {"description": "Purchase not found"}
    }
)
def cancel_purchase(purchase_id: UUID, purchase_service: PurchaseService = Depends(get_purchase_service)):
    purchase_service.cancel(purchase_id)
    return {"message": "Purchase cancelled successfully"}
