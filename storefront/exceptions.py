"""
Service layer error taxonomy.

Services raise the specific kind; the HTTP layer maps every ServiceError to
its status code in one exception handler (see storefront.main).
"""
from fastapi import status


class ServiceError(Exception):
    """Base class for domain errors raised by the service layer"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Entity does not exist"""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    """Uniqueness violation (duplicate email, category name, review, wishlist entry)"""
    status_code = status.HTTP_409_CONFLICT


class BadRequestError(ServiceError):
    """Referential or state violation (inactive product purchase, double cancel)"""
    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenError(ServiceError):
    """Caller may not touch this entity"""
    status_code = status.HTTP_403_FORBIDDEN


class UnauthorizedError(ServiceError):
    """Authentication failed"""
    status_code = status.HTTP_401_UNAUTHORIZED
