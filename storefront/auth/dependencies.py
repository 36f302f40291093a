from fastapi import HTTPException, status, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from storefront.auth.jwt_handler import jwt_handler, TokenError
import logging

logger = logging.getLogger(__name__)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(HTTPBearer())
) -> dict:
    """Dependency to extract and validate the access token

    Works with Security(security) authentication scheme. The user is taken
    from the token claims; the database is not consulted.
    """
    if not credentials:
        logger.warning("Authentication credentials missing")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing"
        )

    try:
        payload = jwt_handler.verify_access_token(credentials.credentials)
    except TokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    email = payload.get("email")
    if not email:
        logger.warning("Token missing email claim")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing email claim"
        )

    logger.debug(f"Authenticated user: {email} (user_id: {user_id})")

    return {
        "user_id": user_id,
        "email": email,
        "name": payload.get("name"),
        "payload": payload
    }
