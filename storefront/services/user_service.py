from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from storefront.models.user import User
from storefront.schemas.user import UserCreate, UserUpdate
from storefront.auth.security import hash_password, verify_password
from storefront.services.persistence import commit_unique
from storefront.exceptions import NotFoundError, ConflictError

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user operations

    purchases, reviews and wishlist are optional collaborators wired by
    build_services; profile statistics fall back to zeros without them.
    """

    def __init__(self, db: Session, purchases=None, reviews=None, wishlist=None):
        self.db = db
        self.purchases = purchases
        self.reviews = reviews
        self.wishlist = wishlist

    def create(self, user_data: UserCreate) -> User:
        """Create a new user with a hashed password"""
        if self.find_by_email(user_data.email):
            raise ConflictError("User with this email already exists")

        user = User(
            email=user_data.email,
            password_hash=hash_password(user_data.password),
            name=user_data.name,
        )
        self.db.add(user)
        commit_unique(self.db, "User with this email already exists")
        self.db.refresh(user)

        logger.info(f"Created user {user.id} ({user.email})")
        return user

    def find_all(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at.desc()).all()

    def find_one(self, user_id: UUID) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def update(self, user_id: UUID, user_data: UserUpdate) -> User:
        """Partial update; only fields present in the request are applied"""
        user = self.find_one(user_id)
        update_data = user_data.model_dump(exclude_unset=True)

        new_email = update_data.get("email")
        if new_email and new_email != user.email:
            existing = self.db.query(User).filter(User.email == new_email, User.id != user.id).first()
            if existing:
                raise ConflictError("User with this email already exists")

        password = update_data.pop("password", None)
        if password:
            user.password_hash = hash_password(password)

        for field, value in update_data.items():
            setattr(user, field, value)

        commit_unique(self.db, "User with this email already exists")
        self.db.refresh(user)
        return user

    def remove(self, user_id: UUID) -> None:
        user = self.find_one(user_id)
        self.db.delete(user)
        self.db.commit()
        logger.info(f"Deleted user {user_id}")

    def validate_user(self, email: str, password: str) -> Optional[User]:
        """Return the user when the password matches, otherwise None"""
        user = self.find_by_email(email)
        if user and verify_password(password, user.password_hash):
            return user
        return None

    def get_user_profile(self, user_id: UUID) -> dict:
        user = self.find_one(user_id)

        total_purchases, total_spent = 0, 0.0
        if self.purchases:
            total_purchases, total_spent = self.purchases.get_user_purchase_summary(user.id)

        wishlist_count = 0
        if self.wishlist:
            wishlist_count = self.wishlist.count_user_items(user.id)

        total_reviews, average_rating_given = 0, 0.0
        if self.reviews:
            total_reviews, average_rating_given = self.reviews.get_user_review_summary(user.id)

        return {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "is_active": user.is_active,
            "created_at": user.created_at,
            "updated_at": user.updated_at,
            "statistics": {
                "total_purchases": total_purchases,
                "total_spent": total_spent,
                "wishlist_count": wishlist_count,
                "total_reviews": total_reviews,
                "average_rating_given": average_rating_given,
                "member_since": user.created_at,
                "is_active": user.is_active,
            },
        }

    def get_user_purchases(self, user_id: UUID) -> list:
        self.find_one(user_id)
        if self.purchases:
            return self.purchases.find_by_user(user_id)
        return []
