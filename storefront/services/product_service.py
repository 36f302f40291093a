from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional
from uuid import UUID
import logging

from storefront.models.product import Product
from storefront.models.category import Category
from storefront.schemas.product import ProductCreate, ProductUpdate, ProductListResponse
from storefront.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ProductService:
    """Service layer for product operations"""

    def __init__(self, db: Session, categories=None, purchases=None, reviews=None):
        self.db = db
        self.categories = categories
        self.purchases = purchases
        self.reviews = reviews

    def product_to_response_dict(self, product: Product) -> dict:
        """Convert Product model to a response dict, with review stats when reviews are wired"""
        product_dict = {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "price": product.price,
            "category_id": product.category_id,
            "category": {
                "id": product.category.id,
                "name": product.category.name,
                "description": product.category.description,
            } if product.category else None,
            "is_active": product.is_active,
            "total_purchases": product.total_purchases,
            "average_rating": product.average_rating,
            "total_reviews": product.total_reviews,
            "created_at": product.created_at,
            "updated_at": product.updated_at,
        }

        if self.reviews:
            product_dict["review_stats"] = self.reviews.get_product_rating_stats(product.id)

        return product_dict

    def _ensure_category_exists(self, category_id: Optional[UUID]) -> None:
        if category_id is None:
            return
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError(f"Category not found: {category_id}")

    def create(self, product_data: ProductCreate) -> Product:
        self._ensure_category_exists(product_data.category_id)

        product = Product(
            name=product_data.name,
            description=product_data.description,
            price=product_data.price,
            category_id=product_data.category_id,
        )
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)

        logger.info(f"Created product {product.id} ({product.name})")
        return product

    def find_all(
        self,
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        category_id: Optional[UUID] = None,
        q: Optional[str] = None,
        page: int = 1,
        page_size: int = 20
    ) -> ProductListResponse:
        """List active products, newest first, with optional filters"""
        query = self.db.query(Product).filter(Product.is_active.is_(True))

        if price_min is not None:
            query = query.filter(Product.price >= price_min)
        if price_max is not None:
            query = query.filter(Product.price <= price_max)
        if category_id:
            query = query.filter(Product.category_id == category_id)
        if q:
            pattern = f"%{q}%"
            query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))

        total = query.count()

        products = query.order_by(Product.created_at.desc()).offset(
            (page - 1) * page_size
        ).limit(page_size).all()

        logger.debug(f"Found {len(products)} products (page {page}, total: {total})")

        return ProductListResponse(
            products=[self.product_to_response_dict(p) for p in products],
            total=total,
            page=page,
            page_size=page_size,
            has_next=(page * page_size) < total
        )

    def search(self, keyword: str) -> List[Product]:
        pattern = f"%{keyword}%"
        return self.db.query(Product).filter(
            Product.is_active.is_(True),
            or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
        ).order_by(Product.created_at.desc()).all()

    def find_one(self, product_id: UUID) -> Product:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found")
        return product

    def update(self, product_id: UUID, product_data: ProductUpdate) -> Product:
        product = self.find_one(product_id)
        update_data = product_data.model_dump(exclude_unset=True)

        if update_data.get("category_id") is not None:
            self._ensure_category_exists(update_data["category_id"])

        for field, value in update_data.items():
            setattr(product, field, value)

        self.db.commit()
        self.db.refresh(product)
        return product

    def remove(self, product_id: UUID) -> None:
        product = self.find_one(product_id)
        self.db.delete(product)
        self.db.commit()
        logger.info(f"Deleted product {product_id}")

    def get_available_categories(self) -> list:
        if self.categories:
            return self.categories.find_all()
        return []

    def get_product_purchases(self, product_id: UUID) -> list:
        self.find_one(product_id)
        if self.purchases:
            return self.purchases.find_by_product(product_id)
        return []

    def increment_purchase_count(self, product_id: UUID) -> None:
        # Single UPDATE so concurrent purchases never lose an increment
        self.db.query(Product).filter(Product.id == product_id).update(
            {Product.total_purchases: Product.total_purchases + 1},
            synchronize_session=False
        )
        self.db.commit()

    def update_rating(self, product_id: UUID, rating: float, is_new_review: bool = True) -> None:
        """Fold a new review rating into the product's running average

        Only new reviews move the average; edits and deletions leave it alone.
        """
        product = self.find_one(product_id)

        if not is_new_review:
            return

        total_rating = product.average_rating * product.total_reviews + rating
        new_total_reviews = product.total_reviews + 1
        product.average_rating = round(total_rating / new_total_reviews, 2)
        product.total_reviews = new_total_reviews

        self.db.commit()
        logger.info(f"Product {product_id} rating now {product.average_rating} over {new_total_reviews} reviews")

    def get_popular_products(self, limit: int = 10) -> List[Product]:
        return self.db.query(Product).filter(Product.is_active.is_(True)).order_by(
            Product.total_purchases.desc(),
            Product.average_rating.desc()
        ).limit(limit).all()

    def get_products_by_category(self, category_id: UUID) -> List[Product]:
        return self.db.query(Product).filter(
            Product.category_id == category_id,
            Product.is_active.is_(True)
        ).order_by(Product.created_at.desc()).all()
