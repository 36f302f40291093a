"""Commit helpers shared by the domain services"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from storefront.exceptions import ConflictError

logger = logging.getLogger(__name__)


def commit_unique(db: Session, conflict_message: str) -> None:
    """Commit, turning a unique constraint violation into ConflictError

    The services check for duplicates before writing; a concurrent insert
    can still land between that check and this commit.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Commit rejected by a unique constraint: {e.orig}")
        raise ConflictError(conflict_message) from e
