from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional, Tuple
from uuid import UUID
from datetime import datetime
import logging

from storefront.models.purchase import Purchase
from storefront.models.product import Product
from storefront.models.category import Category
from storefront.models.user import User
from storefront.schemas.purchase import PurchaseCreate
from storefront.services.product_service import ProductService
from storefront.services.aggregation import monthly_counts, round2
from storefront.exceptions import NotFoundError, BadRequestError

logger = logging.getLogger(__name__)


class PurchaseService:
    """Service layer for purchase operations"""

    def __init__(self, db: Session, users=None, products: Optional[ProductService] = None):
        self.db = db
        self.users = users
        self.products = products or ProductService(db)

    def create(self, purchase_data: PurchaseCreate) -> Purchase:
        """Record a completed purchase at the product's current price"""
        user = self.db.query(User).filter(User.id == purchase_data.user_id).first()
        if not user:
            raise BadRequestError("User not found")

        product = self.db.query(Product).filter(Product.id == purchase_data.product_id).first()
        if not product:
            raise BadRequestError("Product not found")

        if not product.is_active:
            raise BadRequestError("Product is not available for purchase")

        purchase = Purchase(
            user_id=user.id,
            product_id=product.id,
            price=product.price,
            status="completed",
        )
        self.db.add(purchase)
        self.db.commit()

        # Counter is bumped in its own commit after the purchase is stored
        self.products.increment_purchase_count(product.id)
        self.db.refresh(purchase)

        logger.info(f"Purchase {purchase.id}: user {user.id} bought product {product.id} for {purchase.price}")
        return purchase

    def find_all(self, user_id: Optional[UUID] = None) -> List[Purchase]:
        query = self.db.query(Purchase)
        if user_id:
            query = query.filter(Purchase.user_id == user_id)
        return query.order_by(Purchase.created_at.desc()).all()

    def find_one(self, purchase_id: UUID) -> Purchase:
        purchase = self.db.query(Purchase).filter(Purchase.id == purchase_id).first()
        if not purchase:
            raise NotFoundError("Purchase not found")
        return purchase

    def cancel(self, purchase_id: UUID) -> Purchase:
        purchase = self.find_one(purchase_id)

        if purchase.status == "cancelled":
            raise BadRequestError("Purchase is already cancelled")
        if purchase.status != "completed":
            raise BadRequestError("Only completed purchases can be cancelled")

        purchase.status = "cancelled"
        self.db.commit()
        self.db.refresh(purchase)

        logger.info(f"Cancelled purchase {purchase_id}")
        return purchase

    def find_by_user(self, user_id: UUID) -> List[Purchase]:
        return self.find_all(user_id=user_id)

    def find_by_product(self, product_id: UUID) -> List[Purchase]:
        return self.db.query(Purchase).filter(
            Purchase.product_id == product_id
        ).order_by(Purchase.created_at.desc()).all()

    def get_total_purchases(self) -> int:
        return self.db.query(func.count(Purchase.id)).filter(Purchase.status == "completed").scalar()

    def get_total_revenue(self) -> float:
        revenue = self.db.query(func.sum(Purchase.price)).filter(Purchase.status == "completed").scalar()
        return float(revenue or 0)

    def get_user_purchase_summary(self, user_id: UUID) -> Tuple[int, float]:
        """Completed purchase count and spend for one user"""
        count, spent = self.db.query(func.count(Purchase.id), func.sum(Purchase.price)).filter(
            Purchase.user_id == user_id,
            Purchase.status == "completed"
        ).one()
        return count, round2(spent)

    # Aggregations used by the statistics reports

    def count_purchases(self, since: Optional[datetime] = None) -> int:
        query = self.db.query(func.count(Purchase.id))
        if since is not None:
            query = query.filter(Purchase.created_at >= since)
        return query.scalar()

    def get_monthly_trends(self, since: datetime) -> List[dict]:
        return monthly_counts(self.db, Purchase.created_at, since)

    def get_top_customers(self, limit: int = 10) -> List[dict]:
        """Users ranked by spend summed over every purchase, whatever its status"""
        total_spent = func.sum(Purchase.price).label("total_spent")
        rows = self.db.query(User.id, User.name, User.email, total_spent).join(
            Purchase, Purchase.user_id == User.id
        ).group_by(User.id, User.name, User.email).order_by(total_spent.desc()).limit(limit).all()
        return [
            {"id": row.id, "name": row.name, "email": row.email, "total_spent": round2(row.total_spent)}
            for row in rows
        ]

    def get_most_active_buyers(self, limit: int = 10) -> List[dict]:
        purchase_count = func.count(Purchase.id).label("purchase_count")
        rows = self.db.query(User.id, User.name, User.email, User.created_at, purchase_count).join(
            Purchase, Purchase.user_id == User.id
        ).group_by(User.id, User.name, User.email, User.created_at).order_by(
            purchase_count.desc()
        ).limit(limit).all()
        return [
            {
                "id": row.id,
                "name": row.name,
                "email": row.email,
                "created_at": row.created_at,
                "purchase_count": row.purchase_count,
            }
            for row in rows
        ]

    def get_most_purchased_products(self, limit: int = 10) -> List[dict]:
        purchase_count = func.count(Purchase.id).label("purchase_count")
        rows = self.db.query(
            Product.id, Product.name, Product.price, Product.average_rating, purchase_count
        ).join(
            Purchase, Purchase.product_id == Product.id
        ).group_by(
            Product.id, Product.name, Product.price, Product.average_rating
        ).order_by(purchase_count.desc()).limit(limit).all()
        return [
            {
                "id": row.id,
                "name": row.name,
                "price": row.price,
                "average_rating": row.average_rating,
                "purchase_count": row.purchase_count,
            }
            for row in rows
        ]

    def get_purchase_volume_by_category(self, limit: int = 10) -> List[dict]:
        """Purchases per category name; purchases whose product or category is gone are skipped"""
        purchase_count = func.count(Purchase.id).label("purchase_count")
        rows = self.db.query(Category.name, purchase_count).select_from(Purchase).join(
            Product, Product.id == Purchase.product_id
        ).join(
            Category, Category.id == Product.category_id
        ).group_by(Category.name).order_by(purchase_count.desc()).limit(limit).all()
        return [{"category_name": row.name, "purchase_count": row.purchase_count} for row in rows]
