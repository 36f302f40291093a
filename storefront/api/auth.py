from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_services
from storefront.auth.dependencies import get_current_user
from storefront.schemas.auth import RegisterRequest, LoginRequest, RefreshTokenRequest, TokenResponse, MessageResponse
from storefront.services.auth_service import AuthService
from storefront.services.registry import ServiceRegistry

router = APIRouter(
    prefix="/auth",
    tags=["Auth"]
)


def get_auth_service(services: ServiceRegistry = Depends(get_services)) -> AuthService:
    """Dependency to get auth service"""
    return services.auth


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create an account and receive an access/refresh token pair.

    **Validation:**
    - `email` must be a valid address and unused
    - `password` 6 to 50 characters
    - `name` up to 100 characters
    """,
    responses={
        201: {"description": "User registered"},
        409: {"description": "User with this email already exists"},
        422: {"description": "Invalid request data"}
    }
)
def register(register_data: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    return auth_service.register(register_data)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    responses={401: {"description": "Invalid credentials"}}
)
def login(login_data: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    return auth_service.login(login_data)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Exchange a refresh token for a new token pair",
    responses={401: {"description": "Invalid refresh token"}}
)
def refresh(refresh_data: RefreshTokenRequest, auth_service: AuthService = Depends(get_auth_service)):
    return auth_service.refresh_token(refresh_data.refresh_token)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="Tokens are stateless; the client is expected to discard them.",
    responses={401: {"description": "Authentication required"}}
)
def logout(
    current_user: dict = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
):
    return auth_service.logout(current_user)
