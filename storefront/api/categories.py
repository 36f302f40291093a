from fastapi import APIRouter, Depends, status
from typing import List
from uuid import UUID

from storefront.api.deps import get_services
from storefront.auth.dependencies import get_current_user
from storefront.schemas.auth import MessageResponse
from storefront.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from storefront.schemas.product import ProductResponse
from storefront.services.category_service import CategoryService
from storefront.services.registry import ServiceRegistry

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
    dependencies=[Depends(get_current_user)]
)


def get_category_service(services: ServiceRegistry = Depends(get_services)) -> CategoryService:
    """Dependency to get category service"""
    return services.categories


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
    responses={409: {"description": "Category with this name already exists"}}
)
def create_category(category_data: CategoryCreate, category_service: CategoryService = Depends(get_category_service)):
    return category_service.create(category_data)


@router.get(
    "",
    response_model=List[CategoryResponse],
    summary="List active categories",
    description="Returns active categories, newest first."
)
def list_categories(category_service: CategoryService = Depends(get_category_service)):
    return category_service.find_all()


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Get category by ID",
    responses={404: {"description": "Category not found"}}
)
def get_category(category_id: UUID, category_service: CategoryService = Depends(get_category_service)):
    return category_service.find_one(category_id)


@router.get(
    "/{category_id}/products",
    response_model=List[ProductResponse],
    summary="List active products in a category"
)
def get_category_products(category_id: UUID, services: ServiceRegistry = Depends(get_services)):
    products = services.categories.get_category_products(category_id)
    return [services.products.product_to_response_dict(p) for p in products]


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Update a category",
    responses={
        404: {"description": "Category not found"},
        409: {"description": "Category with this name already exists"}
    }
)
def update_category(
    category_id: UUID,
    category_data: CategoryUpdate,
    category_service: CategoryService = Depends(get_category_service)
):
    return category_service.update(category_id, category_data)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    summary="Delete a category",
    description="""
    Hard delete. Products in the category are not touched and keep
    referencing the removed category id.
    """
)
def delete_category(category_id: UUID, category_service: CategoryService = Depends(get_category_service)):
    category_service.remove(category_id)
    return {"message": "Category deleted successfully"}
