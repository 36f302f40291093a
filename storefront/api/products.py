from fastapi import APIRouter, Depends, status, Query
from typing import List, Optional
from uuid import UUID

from storefront.api.deps import get_services
from storefront.auth.dependencies import get_current_user
from storefront.schemas.auth import MessageResponse
from storefront.schemas.category import CategoryResponse
from storefront.schemas.product import ProductCreate, ProductUpdate, ProductResponse, ProductListResponse
from storefront.schemas.purchase import PurchaseResponse
from storefront.services.product_service import ProductService
from storefront.services.registry import ServiceRegistry

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(get_current_user)]
)


def get_product_service(services: ServiceRegistry = Depends(get_services)) -> ProductService:
    """Dependency to get product service"""
    return services.products


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="""
    Create a new product.

    **Requirements:**
    - Authentication: Required (JWT token)
    - `price` must be greater than zero
    - `category_id`, when given, must reference an existing category

    Use `GET /products/categories` to list the available categories.
    """,
    responses={
        201: {
            "description": "Product created successfully",
            "content": {
                "application/json": {
                    "example": {
                        "id": "123e4567-e89b-12d3-a456-426614174000",
                        "name": "Wireless Headphones",
                        "description": "Noise cancelling over-ear headphones",
                        "price": 199.99,
                        "category_id": "223e4567-e89b-12d3-a456-426614174000",
                        "is_active": True,
                        "total_purchases": 0,
                        "average_rating": 0,
                        "total_reviews": 0
                    }
                }
            }
        },
        401: {"description": "Authentication required"},
        404: {"description": "Category not found"},
        422: {"description": "Invalid request data"}
    }
)
def create_product(product_data: ProductCreate, product_service: ProductService = Depends(get_product_service)):
    """Create a product"""
    product = product_service.create(product_data)
    return product_service.product_to_response_dict(product)


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List active products",
    description="""
    Get a paginated list of active products, newest first.

    **Filtering:**
    - `price_min` / `price_max`: inclusive price bounds
    - `category`: category UUID
    - `q`: case-insensitive match on name or description

    **Pagination:**
    - `page`: Page number (1-indexed, default: 1)
    - `page_size`: Number of items per page (default: 20, max: 100)
    """,
    responses={
        200: {"description": "Paginated list of products"},
        401: {"description": "Authentication required"}
    }
)
def list_products(
    price_min: Optional[float] = Query(None, ge=0, description="Minimum price"),
    price_max: Optional[float] = Query(None, ge=0, description="Maximum price"),
    category: Optional[UUID] = Query(None, description="Filter by category UUID"),
    q: Optional[str] = Query(None, description="Search in name and description"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Number of items per page"),
    product_service: ProductService = Depends(get_product_service)
):
    return product_service.find_all(
        price_min=price_min,
        price_max=price_max,
        category_id=category,
        q=q,
        page=page,
        page_size=page_size
    )


@router.get(
    "/categories",
    response_model=List[CategoryResponse],
    summary="List categories available for products"
)
def get_available_categories(product_service: ProductService = Depends(get_product_service)):
    return product_service.get_available_categories()


@router.get("/search", response_model=List[ProductResponse], summary="Search active products")
def search_products(
    q: str = Query(..., min_length=1, description="Keyword matched against name and description"),
    product_service: ProductService = Depends(get_product_service)
):
    return [product_service.product_to_response_dict(p) for p in product_service.search(q)]


@router.get(
    "/popular",
    response_model=List[ProductResponse],
    summary="Most purchased active products",
    description="Ordered by purchase count, then by average rating."
)
def get_popular_products(
    limit: int = Query(10, ge=1, le=100),
    product_service: ProductService = Depends(get_product_service)
):
    return [product_service.product_to_response_dict(p) for p in product_service.get_popular_products(limit)]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    responses={404: {"description": "Product not found"}}
)
def get_product(product_id: UUID, product_service: ProductService = Depends(get_product_service)):
    return product_service.product_to_response_dict(product_service.find_one(product_id))


@router.get("/{product_id}/purchases", response_model=List[PurchaseResponse], summary="List purchases of a product")
def get_product_purchases(product_id: UUID, product_service: ProductService = Depends(get_product_service)):
    return product_service.get_product_purchases(product_id)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Partial update: only the fields sent are changed.",
    responses={404: {"description": "Product or category not found"}}
)
def update_product(
    product_id: UUID,
    product_data: ProductUpdate,
    product_service: ProductService = Depends(get_product_service)
):
    product = product_service.update(product_id, product_data)
    return product_service.product_to_response_dict(product)


@router.delete("/{product_id}", response_model=MessageResponse, summary="Delete a product")
def delete_product(product_id: UUID, product_service: ProductService = Depends(get_product_service)):
    product_service.remove(product_id)
    return {"message": "Product deleted successfully"}
