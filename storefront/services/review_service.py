from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional, Tuple
from uuid import UUID
from datetime import datetime
import logging

from storefront.models.review import Review
from storefront.models.product import Product
from storefront.models.user import User
from storefront.schemas.review import ReviewCreate, ReviewUpdate
from storefront.services.product_service import ProductService
from storefront.services.aggregation import round2
from storefront.services.persistence import commit_unique
from storefront.exceptions import NotFoundError, ConflictError, ForbiddenError

logger = logging.getLogger(__name__)


def empty_rating_distribution() -> dict:
    return {str(rating): 0 for rating in range(1, 6)}


class ReviewService:
    """Service layer for review operations

    Reviews are soft deleted; inactive rows are invisible to every read but
    still count towards the one-review-per-user-and-product rule.
    """

    def __init__(self, db: Session, users=None, products: Optional[ProductService] = None):
        self.db = db
        self.users = users
        self.products = products or ProductService(db)

    def _active(self):
        return self.db.query(Review).filter(Review.is_active.is_(True))

    def _apply_filters(
        self,
        query,
        rating: Optional[int] = None,
        user_id: Optional[UUID] = None,
        product_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ):
        if rating:
            query = query.filter(Review.rating == rating)
        if user_id:
            query = query.filter(Review.user_id == user_id)
        if product_id:
            query = query.filter(Review.product_id == product_id)

        query = query.order_by(Review.created_at.desc())

        if limit:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)
        return query

    def _ensure_user_exists(self, user_id: UUID) -> None:
        if not self.db.query(User.id).filter(User.id == user_id).first():
            raise NotFoundError("User not found")

    def _ensure_product_exists(self, product_id: UUID) -> None:
        if not self.db.query(Product.id).filter(Product.id == product_id).first():
            raise NotFoundError("Product not found")

    def create_review(self, product_id: UUID, review_data: ReviewCreate) -> Review:
        self._ensure_user_exists(review_data.user_id)
        self._ensure_product_exists(product_id)

        existing = self.db.query(Review).filter(
            Review.user_id == review_data.user_id,
            Review.product_id == product_id
        ).first()
        if existing:
            raise ConflictError("User has already reviewed this product")

        review = Review(
            user_id=review_data.user_id,
            product_id=product_id,
            rating=review_data.rating,
            comment=review_data.comment,
        )
        self.db.add(review)
        commit_unique(self.db, "User has already reviewed this product")

        # Rating is folded into the product after the review is stored
        self.products.update_rating(product_id, review_data.rating, is_new_review=True)
        self.db.refresh(review)

        logger.info(f"Review {review.id}: user {review.user_id} rated product {product_id} {review.rating}")
        return review

    def get_product_reviews(
        self,
        product_id: UUID,
        rating: Optional[int] = None,
        user_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[Review]:
        self._ensure_product_exists(product_id)
        query = self._active().filter(Review.product_id == product_id)
        return self._apply_filters(query, rating=rating, user_id=user_id, limit=limit, offset=offset).all()

    def get_review_by_id(self, review_id: UUID) -> Review:
        review = self._active().filter(Review.id == review_id).first()
        if not review:
            raise NotFoundError("Review not found")
        return review

    def update_review(self, review_id: UUID, review_data: ReviewUpdate, user_id: Optional[str] = None) -> Review:
        """Update a review; user_id is the caller, None skips the ownership check"""
        review = self.get_review_by_id(review_id)

        if user_id is not None and str(review.user_id) != str(user_id):
            raise ForbiddenError("You can only update your own reviews")

        for field, value in review_data.model_dump(exclude_unset=True).items():
            setattr(review, field, value)

        self.db.commit()
        self.db.refresh(review)
        return review

    def delete_review(self, review_id: UUID, user_id: Optional[str] = None) -> None:
        review = self.get_review_by_id(review_id)

        if user_id is not None and str(review.user_id) != str(user_id):
            raise ForbiddenError("You can only delete your own reviews")

        review.is_active = False
        self.db.commit()
        logger.info(f"Deactivated review {review_id}")

    def get_all_reviews(
        self,
        rating: Optional[int] = None,
        user_id: Optional[UUID] = None,
        product_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[Review]:
        return self._apply_filters(
            self._active(), rating=rating, user_id=user_id, product_id=product_id, limit=limit, offset=offset
        ).all()

    def get_user_reviews(
        self,
        user_id: UUID,
        rating: Optional[int] = None,
        product_id: Optional[UUID] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[Review]:
        self._ensure_user_exists(user_id)
        query = self._active().filter(Review.user_id == user_id)
        return self._apply_filters(query, rating=rating, product_id=product_id, limit=limit, offset=offset).all()

    def _rating_stats(self, *criteria) -> dict:
        rows = self.db.query(Review.rating, func.count(Review.id)).filter(
            Review.is_active.is_(True), *criteria
        ).group_by(Review.rating).all()

        distribution = empty_rating_distribution()
        for rating, count in rows:
            distribution[str(rating)] = count

        total = sum(distribution.values())
        rating_sum = sum(int(rating) * count for rating, count in distribution.items())
        return {
            "total_reviews": total,
            "average_rating": round2(rating_sum / total) if total else 0,
            "rating_distribution": distribution,
        }

    def get_product_rating_stats(self, product_id: UUID) -> dict:
        return self._rating_stats(Review.product_id == product_id)

    def get_review_statistics(self) -> dict:
        return self._rating_stats()

    def get_top_rated_products(self, limit: int = 10) -> List[dict]:
        """Products with at least one active review, best average first, ties by review count"""
        average_rating = func.avg(Review.rating).label("average_rating")
        total_reviews = func.count(Review.id).label("total_reviews")
        rows = self.db.query(
            Product.id, Product.name, Product.description, Product.price, average_rating, total_reviews
        ).join(
            Review, Review.product_id == Product.id
        ).filter(
            Review.is_active.is_(True)
        ).group_by(
            Product.id, Product.name, Product.description, Product.price
        ).order_by(average_rating.desc(), total_reviews.desc()).limit(limit).all()

        return [
            {
                "product": {
                    "id": row.id,
                    "name": row.name,
                    "description": row.description,
                    "price": row.price,
                },
                "average_rating": round2(row.average_rating),
                "total_reviews": row.total_reviews,
            }
            for row in rows
        ]

    def get_user_review_summary(self, user_id: UUID) -> Tuple[int, float]:
        """Active review count and average rating given by one user"""
        count, average = self.db.query(func.count(Review.id), func.avg(Review.rating)).filter(
            Review.user_id == user_id,
            Review.is_active.is_(True)
        ).one()
        return count, round2(average)

    # Aggregations used by the statistics reports

    def count_reviews(self, since: Optional[datetime] = None) -> int:
        query = self.db.query(func.count(Review.id)).filter(Review.is_active.is_(True))
        if since is not None:
            query = query.filter(Review.created_at >= since)
        return query.scalar()

    def get_most_active_reviewers(self, limit: int = 10) -> List[dict]:
        review_count = func.count(Review.id).label("review_count")
        rows = self.db.query(User.id, User.name, User.email, review_count).join(
            Review, Review.user_id == User.id
        ).filter(
            Review.is_active.is_(True)
        ).group_by(User.id, User.name, User.email).order_by(review_count.desc()).limit(limit).all()
        return [
            {"id": row.id, "name": row.name, "email": row.email, "review_count": row.review_count}
            for row in rows
        ]
