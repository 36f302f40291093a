import pytest

from storefront.auth.jwt_handler import JWTHandler, TokenError
from storefront.exceptions import ConflictError, UnauthorizedError
from storefront.schemas.auth import LoginRequest, RegisterRequest
from storefront.schemas.user import UserUpdate


def register(services, email="ada@example.com", password="secret123"):
    return services.auth.register(RegisterRequest(email=email, password=password, name="Ada"))


def test_register_issues_both_tokens(services):
    tokens = register(services)

    assert tokens["token_type"] == "bearer"
    assert tokens["user"]["email"] == "ada@example.com"
    payload = services.auth.tokens.verify_access_token(tokens["access_token"])
    assert payload["sub"] == str(tokens["user"]["id"])
    assert payload["type"] == "access"
    assert services.auth.tokens.verify_refresh_token(tokens["refresh_token"])["type"] == "refresh"


def test_register_duplicate_email(services):
    register(services)

    with pytest.raises(ConflictError):
        register(services)


def test_login(services):
    register(services)

    tokens = services.auth.login(LoginRequest(email="ada@example.com", password="secret123"))

    assert tokens["user"]["name"] == "Ada"


@pytest.mark.parametrize("email,password", [
    ("ada@example.com", "wrong-password"),
    ("nobody@example.com", "secret123"),
])
def test_login_failures_share_one_message(services, email, password):
    register(services)

    with pytest.raises(UnauthorizedError, match="Invalid credentials"):
        services.auth.login(LoginRequest(email=email, password=password))


def test_inactive_user_cannot_log_in(services):
    user_id = register(services)["user"]["id"]
    services.users.update(user_id, UserUpdate(is_active=False))

    with pytest.raises(UnauthorizedError, match="Invalid credentials"):
        services.auth.login(LoginRequest(email="ada@example.com", password="secret123"))


def test_refresh(services):
    tokens = register(services)

    refreshed = services.auth.refresh_token(tokens["refresh_token"])

    assert refreshed["user"]["email"] == "ada@example.com"
    with pytest.raises(UnauthorizedError, match="Invalid refresh token"):
        services.auth.refresh_token(tokens["access_token"])
    with pytest.raises(UnauthorizedError):
        services.auth.refresh_token("not-a-token")


def test_logout(services):
    assert services.auth.logout({"email": "ada@example.com"}) == {"message": "Logout successful"}


def test_expired_access_token_rejected():
    handler = JWTHandler(secret="s" * 32, refresh_secret="r" * 32, expires_minutes=-1, refresh_expires_days=1)
    token = handler.create_access_token("user-id", "ada@example.com", "Ada")

    with pytest.raises(TokenError):
        handler.verify_access_token(token)


def test_tokens_are_not_interchangeable():
    handler = JWTHandler(secret="s" * 32, refresh_secret="r" * 32, expires_minutes=5, refresh_expires_days=1)
    refresh = handler.create_refresh_token("user-id", "ada@example.com", "Ada")

    with pytest.raises(TokenError):
        handler.verify_access_token(refresh)
