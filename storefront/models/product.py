from sqlalchemy import Column, Text, Boolean, Float, Integer, DateTime, CheckConstraint, Index, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from storefront.db.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    # Plain reference, no foreign key: deleting a category orphans its products
    category_id = Column(Uuid)
    is_active = Column(Boolean, nullable=False, default=True)
    total_purchases = Column(Integer, nullable=False, default=0)
    average_rating = Column(Float, nullable=False, default=0)
    total_reviews = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("price > 0", name="positive_price"),
        CheckConstraint("total_purchases >= 0", name="non_negative_purchases"),
        CheckConstraint("average_rating >= 0 AND average_rating <= 5", name="rating_range"),
        Index("idx_products_category", "category_id"),
        Index("idx_products_active", "is_active"),
    )

    category = relationship(
        "Category",
        primaryjoin="foreign(Product.category_id) == Category.id",
        viewonly=True,
        lazy="joined",
    )
