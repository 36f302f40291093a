from sqlalchemy.orm import Session
from sqlalchemy import func, distinct
from typing import List, Optional
from uuid import UUID
from datetime import datetime
import logging

from storefront.models.wishlist import WishlistItem, WISHLIST_PRIORITIES
from storefront.models.product import Product
from storefront.models.user import User
from storefront.schemas.wishlist import WishlistAdd, WishlistUpdate
from storefront.services.aggregation import monthly_counts
from storefront.services.persistence import commit_unique
from storefront.exceptions import NotFoundError, ConflictError

logger = logging.getLogger(__name__)


class WishlistService:
    """Service layer for wishlist operations"""

    def __init__(self, db: Session, users=None, products=None):
        self.db = db
        self.users = users
        self.products = products

    def _ensure_user_exists(self, user_id: UUID) -> None:
        if not self.db.query(User.id).filter(User.id == user_id).first():
            raise NotFoundError("User not found")

    def _find_item(self, user_id: UUID, product_id: UUID) -> WishlistItem:
        item = self.db.query(WishlistItem).filter(
            WishlistItem.user_id == user_id,
            WishlistItem.product_id == product_id
        ).first()
        if not item:
            raise NotFoundError("Product not found in wishlist")
        return item

    def add_to_wishlist(self, user_id: UUID, item_data: WishlistAdd) -> WishlistItem:
        self._ensure_user_exists(user_id)
        if not self.db.query(Product.id).filter(Product.id == item_data.product_id).first():
            raise NotFoundError("Product not found")

        existing = self.db.query(WishlistItem).filter(
            WishlistItem.user_id == user_id,
            WishlistItem.product_id == item_data.product_id
        ).first()
        if existing:
            raise ConflictError("Product already in wishlist")

        item = WishlistItem(
            user_id=user_id,
            product_id=item_data.product_id,
            priority=item_data.priority or "medium",
        )
        self.db.add(item)
        commit_unique(self.db, "Product already in wishlist")
        self.db.refresh(item)

        logger.info(f"User {user_id} wishlisted product {item.product_id} ({item.priority})")
        return item

    def get_user_wishlist(self, user_id: UUID, priority: Optional[str] = None) -> List[WishlistItem]:
        self._ensure_user_exists(user_id)
        query = self.db.query(WishlistItem).filter(WishlistItem.user_id == user_id)
        if priority:
            query = query.filter(WishlistItem.priority == priority)
        return query.order_by(WishlistItem.added_at.desc()).all()

    def remove_from_wishlist(self, user_id: UUID, product_id: UUID) -> None:
        self._ensure_user_exists(user_id)
        item = self._find_item(user_id, product_id)
        self.db.delete(item)
        self.db.commit()

    def update_wishlist_item(self, user_id: UUID, product_id: UUID, item_data: WishlistUpdate) -> WishlistItem:
        self._ensure_user_exists(user_id)
        item = self._find_item(user_id, product_id)

        for field, value in item_data.model_dump(exclude_unset=True).items():
            setattr(item, field, value)

        self.db.commit()
        self.db.refresh(item)
        return item

    def get_wishlist_item(self, user_id: UUID, product_id: UUID) -> WishlistItem:
        return self._find_item(user_id, product_id)

    def get_all_wishlists(
        self,
        user_id: Optional[UUID] = None,
        product_id: Optional[UUID] = None,
        priority: Optional[str] = None
    ) -> List[WishlistItem]:
        query = self.db.query(WishlistItem)
        if user_id:
            query = query.filter(WishlistItem.user_id == user_id)
        if product_id:
            query = query.filter(WishlistItem.product_id == product_id)
        if priority:
            query = query.filter(WishlistItem.priority == priority)
        return query.order_by(WishlistItem.added_at.desc()).all()

    def clear_user_wishlist(self, user_id: UUID) -> None:
        self._ensure_user_exists(user_id)
        removed = self.db.query(WishlistItem).filter(
            WishlistItem.user_id == user_id
        ).delete(synchronize_session=False)
        self.db.commit()
        logger.info(f"Cleared {removed} wishlist items for user {user_id}")

    def get_wishlist_statistics(self, user_id: UUID) -> dict:
        counts = self.get_priority_distribution(WishlistItem.user_id == user_id)
        return {
            "total_items": sum(counts.values()),
            "high_priority_items": counts["high"],
            "medium_priority_items": counts["medium"],
            "low_priority_items": counts["low"],
        }

    def get_popular_wishlist_products(self, limit: int = 10) -> List[dict]:
        """Most wishlisted products; items pointing at deleted products are skipped"""
        wishlist_count = func.count(WishlistItem.id).label("wishlist_count")
        unique_users = func.count(distinct(WishlistItem.user_id)).label("unique_users")
        rows = self.db.query(
            Product.id, Product.name, Product.description, Product.price, wishlist_count, unique_users
        ).join(
            WishlistItem, WishlistItem.product_id == Product.id
        ).group_by(
            Product.id, Product.name, Product.description, Product.price
        ).order_by(wishlist_count.desc()).limit(limit).all()

        return [
            {
                "product": {
                    "id": row.id,
                    "name": row.name,
                    "description": row.description,
                    "price": row.price,
                },
                "wishlist_count": row.wishlist_count,
                "unique_users": row.unique_users,
            }
            for row in rows
        ]

    def move_to_cart(self, user_id: UUID, product_id: UUID) -> dict:
        # No cart yet: moving an item only takes it off the wishlist
        self.remove_from_wishlist(user_id, product_id)
        return {"message": "Product moved to cart successfully"}

    def count_user_items(self, user_id: UUID) -> int:
        return self.db.query(func.count(WishlistItem.id)).filter(WishlistItem.user_id == user_id).scalar()

    # Aggregations used by the statistics reports

    def count_items(self) -> int:
        return self.db.query(func.count(WishlistItem.id)).scalar()

    def count_unique_users(self) -> int:
        return self.db.query(func.count(distinct(WishlistItem.user_id))).scalar()

    def get_monthly_trends(self, since: datetime) -> List[dict]:
        return monthly_counts(self.db, WishlistItem.added_at, since)

    def get_priority_distribution(self, *criteria) -> dict:
        rows = self.db.query(WishlistItem.priority, func.count(WishlistItem.id)).filter(
            *criteria
        ).group_by(WishlistItem.priority).all()

        distribution = {priority: 0 for priority in WISHLIST_PRIORITIES}
        for priority, count in rows:
            distribution[priority] = count
        return distribution
