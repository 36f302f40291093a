import logging

from storefront.models.user import User
from storefront.schemas.auth import RegisterRequest, LoginRequest
from storefront.services.user_service import UserService
from storefront.auth.jwt_handler import jwt_handler, JWTHandler, TokenError
from storefront.exceptions import UnauthorizedError, ConflictError

logger = logging.getLogger(__name__)


class AuthService:
    """Register, login and token refresh on top of UserService"""

    def __init__(self, users: UserService, tokens: JWTHandler = jwt_handler):
        self.users = users
        self.tokens = tokens

    def _issue_tokens(self, user: User) -> dict:
        return {
            "access_token": self.tokens.create_access_token(user.id, user.email, user.name),
            "refresh_token": self.tokens.create_refresh_token(user.id, user.email, user.name),
            "token_type": "bearer",
            "user": {
                "id": user.id,
                "email": user.email,
                "name": user.name,
                "is_active": user.is_active,
            },
        }

    def register(self, register_data: RegisterRequest) -> dict:
        if self.users.find_by_email(register_data.email):
            raise ConflictError("User with this email already exists")

        user = self.users.create(register_data)
        logger.info(f"Registered user {user.email}")
        return self._issue_tokens(user)

    def login(self, login_data: LoginRequest) -> dict:
        user = self.users.validate_user(login_data.email, login_data.password)
        if not user or not user.is_active:
            logger.warning(f"Failed login for {login_data.email}")
            raise UnauthorizedError("Invalid credentials")

        logger.info(f"User {user.email} logged in")
        return self._issue_tokens(user)

    def refresh_token(self, refresh_token: str) -> dict:
        try:
            payload = self.tokens.verify_refresh_token(refresh_token)
        except TokenError:
            raise UnauthorizedError("Invalid refresh token")

        user = self.users.find_by_email(payload.get("email", ""))
        if not user or str(user.id) != payload.get("sub") or not user.is_active:
            logger.warning(f"Refresh token for unknown or inactive user {payload.get('sub')}")
            raise UnauthorizedError("Invalid refresh token")

        return self._issue_tokens(user)

    def logout(self, current_user: dict) -> dict:
        # Tokens are stateless; the client discards them
        logger.info(f"User {current_user.get('email')} logged out")
        return {"message": "Logout successful"}
