from sqlalchemy import Column, String, Boolean, DateTime, CheckConstraint, Index, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from storefront.db.database import Base

WISHLIST_PRIORITIES = ("low", "medium", "high")


class WishlistItem(Base):
    __tablename__ = "wishlist_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False)
    product_id = Column(Uuid, nullable=False)
    priority = Column(String(10), nullable=False, default="medium")
    is_notified = Column(Boolean, nullable=False, default=False)  # For price drop notifications
    added_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_wishlist_user_product"),
        CheckConstraint("priority IN ('low', 'medium', 'high')", name="wishlist_priority_valid"),
        Index("idx_wishlist_product", "product_id"),
    )

    user = relationship(
        "User",
        primaryjoin="foreign(WishlistItem.user_id) == User.id",
        viewonly=True,
        lazy="joined",
    )
    product = relationship(
        "Product",
        primaryjoin="foreign(WishlistItem.product_id) == Product.id",
        viewonly=True,
        lazy="joined",
    )
