from sqlalchemy import Column, Integer, Text, Boolean, DateTime, CheckConstraint, Index, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from storefront.db.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False)
    product_id = Column(Uuid, nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        # One review per user and product, soft-deleted rows included
        UniqueConstraint("user_id", "product_id", name="uq_review_user_product"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="rating_valid"),
        Index("idx_reviews_product_rating", "product_id", "rating"),
        Index("idx_reviews_user_created", "user_id", "created_at"),
    )

    user = relationship(
        "User",
        primaryjoin="foreign(Review.user_id) == User.id",
        viewonly=True,
        lazy="joined",
    )
    product = relationship(
        "Product",
        primaryjoin="foreign(Review.product_id) == Product.id",
        viewonly=True,
        lazy="joined",
    )
