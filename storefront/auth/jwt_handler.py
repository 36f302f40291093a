"""
JWT issue and verification for access and refresh tokens.

Both token kinds are HS256 and carry sub, email, name, type, iat and exp.
Access and refresh tokens are signed with separate secrets so one can never
be replayed as the other.
"""
import jwt
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict

from storefront.config import settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenError(Exception):
    """Token is malformed, expired, badly signed or of the wrong type"""


class JWTHandler:
    def __init__(
        self,
        secret: str,
        refresh_secret: str,
        expires_minutes: int,
        refresh_expires_days: int
    ):
        self.secret = secret
        self.refresh_secret = refresh_secret
        self.expires_minutes = expires_minutes
        self.refresh_expires_days = refresh_expires_days

    def _encode(self, claims: Dict, token_type: str, secret: str, lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "type": token_type,
            "iat": now,
            "exp": now + lifetime,
        }
        return jwt.encode(payload, secret, algorithm=ALGORITHM)

    def create_access_token(self, user_id: str, email: str, name: str) -> str:
        claims = {"sub": str(user_id), "email": email, "name": name}
        return self._encode(claims, ACCESS_TOKEN_TYPE, self.secret, timedelta(minutes=self.expires_minutes))

    def create_refresh_token(self, user_id: str, email: str, name: str) -> str:
        claims = {"sub": str(user_id), "email": email, "name": name}
        return self._encode(claims, REFRESH_TOKEN_TYPE, self.refresh_secret, timedelta(days=self.refresh_expires_days))

    def _decode(self, token: str, secret: str, expected_type: str) -> Dict:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "exp", "iat"]}
            )
        except jwt.InvalidTokenError as e:
            logger.warning(f"JWT verification failed: {e}")
            raise TokenError(str(e)) from e

        if payload.get("type") != expected_type:
            logger.warning(f"Expected {expected_type} token, got {payload.get('type')}")
            raise TokenError(f"Not an {expected_type} token")

        return payload

    def verify_access_token(self, token: str) -> Dict:
        return self._decode(token, self.secret, ACCESS_TOKEN_TYPE)

    def verify_refresh_token(self, token: str) -> Dict:
        return self._decode(token, self.refresh_secret, REFRESH_TOKEN_TYPE)


# Global handler instance
jwt_handler = JWTHandler(
    secret=settings.jwt_secret,
    refresh_secret=settings.jwt_refresh_secret,
    expires_minutes=settings.jwt_expires_minutes,
    refresh_expires_days=settings.jwt_refresh_expires_days,
)
