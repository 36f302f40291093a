from fastapi import APIRouter, Depends, status
from typing import List
from uuid import UUID

from storefront.api.deps import get_services
from storefront.auth.dependencies import get_current_user
from storefront.schemas.auth import MessageResponse
from storefront.schemas.user import UserCreate, UserUpdate, UserResponse, UserProfileResponse
from storefront.schemas.purchase import PurchaseResponse
from storefront.services.registry import ServiceRegistry
from storefront.services.user_service import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)]
)


def get_user_service(services: ServiceRegistry = Depends(get_services)) -> UserService:
    """Dependency to get user service"""
    return services.users


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    responses={
        401: {"description": "Authentication required"},
        409: {"description": "User with this email already exists"}
    }
)
def create_user(user_data: UserCreate, user_service: UserService = Depends(get_user_service)):
    return user_service.create(user_data)


@router.get("", response_model=List[UserResponse], summary="List all users")
def list_users(user_service: UserService = Depends(get_user_service)):
    return user_service.find_all()


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Get the authenticated user",
    description="Resolves the user from the `sub` claim of the bearer token.",
    responses={404: {"description": "User not found"}}
)
def get_own_profile(
    current_user: dict = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    return user_service.find_one(UUID(current_user["user_id"]))


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user by ID")
def get_user(user_id: UUID, user_service: UserService = Depends(get_user_service)):
    return user_service.find_one(user_id)


@router.get(
    "/{user_id}/profile",
    response_model=UserProfileResponse,
    summary="Get a user with purchase, wishlist and review statistics",
    responses={404: {"description": "User not found"}}
)
def get_user_profile(user_id: UUID, user_service: UserService = Depends(get_user_service)):
    return user_service.get_user_profile(user_id)


@router.get("/{user_id}/purchases", response_model=List[PurchaseResponse], summary="List a user's purchases")
def get_user_purchases(user_id: UUID, user_service: UserService = Depends(get_user_service)):
    return user_service.get_user_purchases(user_id)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
    description="Partial update: only the fields sent are changed. A new password is re-hashed.",
    responses={
        404: {"description": "User not found"},
        409: {"description": "User with this email already exists"}
    }
)
def update_user(user_id: UUID, user_data: UserUpdate, user_service: UserService = Depends(get_user_service)):
    return user_service.update(user_id, user_data)


@router.delete("/{user_id}", response_model=MessageResponse, summary="Delete a user")
def delete_user(user_id: UUID, user_service: UserService = Depends(get_user_service)):
    user_service.remove(user_id)
    return {"message": "User deleted successfully"}
