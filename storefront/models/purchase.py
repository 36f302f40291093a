from sqlalchemy import Column, String, Float, DateTime, CheckConstraint, Index, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from storefront.db.database import Base

PURCHASE_STATUSES = ("completed", "cancelled", "pending")


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False)
    product_id = Column(Uuid, nullable=False)
    # Snapshot of the product price at purchase time, never updated
    price = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default="completed")
    purchase_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("status IN ('completed', 'cancelled', 'pending')", name="purchase_status_valid"),
        Index("idx_purchases_user", "user_id"),
        Index("idx_purchases_product", "product_id"),
        Index("idx_purchases_created", "created_at"),
    )

    user = relationship(
        "User",
        primaryjoin="foreign(Purchase.user_id) == User.id",
        viewonly=True,
        lazy="joined",
    )
    product = relationship(
        "Product",
        primaryjoin="foreign(Purchase.product_id) == Product.id",
        viewonly=True,
        lazy="joined",
    )
