from fastapi import Depends, Request
from sqlalchemy.orm import Session

from storefront.db.database import get_db
from storefront.services.registry import ServiceRegistry, build_services
from storefront.statistics.service import StatisticsService


def get_services(db: Session = Depends(get_db)) -> ServiceRegistry:
    """Dependency to get the domain services bound to the request session"""
    return build_services(db)


def get_statistics_service(request: Request) -> StatisticsService:
    """Dependency to get the process-wide statistics service built in the lifespan"""
    return request.app.state.statistics_service
