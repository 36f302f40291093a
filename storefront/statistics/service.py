"""
Statistics aggregation over the domain tables.

Each report is computed on its own session inside a worker thread, so the
overview can build all six side by side without blocking the event loop.
Purchases, reviews and wishlist are optional collaborators: a missing one
(None) or one that raises turns its part of a report into a zero shape.
Failures of the statistics service's own queries are not caught.
"""
from sqlalchemy import extract, func, exists
from sqlalchemy.orm import Session
from fastapi.encoders import jsonable_encoder
from typing import Any, Callable, Optional
from datetime import datetime
import asyncio
import logging

from storefront.models.user import User
from storefront.models.product import Product
from storefront.models.category import Category
from storefront.services.purchase_service import PurchaseService
from storefront.services.review_service import ReviewService, empty_rating_distribution
from storefront.services.wishlist_service import WishlistService
from storefront.services.aggregation import round2
from storefront.statistics.cache import StatisticsCache, StatsTopic
from storefront.statistics.periods import utcnow, month_ago, week_ago, trailing_year_start

logger = logging.getLogger(__name__)

TOP_LIMIT = 10


def percentage(part: int, whole: int) -> float:
    return round2(part / whole * 100) if whole else 0


def empty_purchase_statistics() -> dict:
    return {
        "total_purchases": 0,
        "total_revenue": 0,
        "average_order_value": 0,
        "purchases_this_month": 0,
        "purchases_this_week": 0,
        "purchase_trends": [],
        "top_customers": [],
        "revenue_by_category": [],
    }


def empty_review_statistics() -> dict:
    return {
        "total_reviews": 0,
        "average_rating": 0,
        "rating_distribution": empty_rating_distribution(),
        "reviews_this_month": 0,
        "reviews_this_week": 0,
        "top_rated_products": [],
        "most_active_reviewers": [],
    }


def empty_wishlist_statistics() -> dict:
    return {
        "total_wishlist_items": 0,
        "unique_users_with_wishlists": 0,
        "average_wishlist_size": 0,
        "most_wishlisted_products": [],
        "wishlist_trends": [],
        "priority_distribution": {"low": 0, "medium": 0, "high": 0},
        "wishlist_engagement_rate": 0,
    }


class StatisticsService:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        cache: StatisticsCache,
        purchases: Optional[Callable[[Session], PurchaseService]] = PurchaseService,
        reviews: Optional[Callable[[Session], ReviewService]] = ReviewService,
        wishlist: Optional[Callable[[Session], WishlistService]] = WishlistService,
        clock: Callable[[], datetime] = utcnow
    ):
        self.session_factory = session_factory
        self.cache = cache
        self.purchases = purchases
        self.reviews = reviews
        self.wishlist = wishlist
        self.clock = clock

    # Read path

    async def _read_through(self, topic: StatsTopic, compute: Callable[[], Any]) -> dict:
        cached = await self.cache.get(topic)
        if cached is not None:
            return {**cached, "cached": True}

        report = await compute()
        await self.cache.set(topic, report)
        return report

    async def get_user_statistics(self) -> dict:
        return await self._read_through(StatsTopic.USERS, self.compute_user_statistics)

    async def get_product_statistics(self) -> dict:
        return await self._read_through(StatsTopic.PRODUCTS, self.compute_product_statistics)

    async def get_purchase_statistics(self) -> dict:
        return await self._read_through(StatsTopic.PURCHASES, self.compute_purchase_statistics)

    async def get_review_statistics(self) -> dict:
        return await self._read_through(StatsTopic.REVIEWS, self.compute_review_statistics)

    async def get_wishlist_statistics(self) -> dict:
        return await self._read_through(StatsTopic.WISHLIST, self.compute_wishlist_statistics)

    async def get_category_statistics(self) -> dict:
        return await self._read_through(StatsTopic.CATEGORIES, self.compute_category_statistics)

    async def get_overall_statistics(self) -> dict:
        return await self._read_through(StatsTopic.OVERVIEW, self.compute_overall_statistics)

    async def invalidate(self, topic: StatsTopic) -> None:
        await self.cache.invalidate(topic)

    async def invalidate_all(self) -> None:
        await self.cache.invalidate_all()

    # Compute functions

    def _build(self, builder: Callable[[Session, datetime], dict]) -> dict:
        now = self.clock()
        with self.session_factory() as db:
            report = builder(db, now)
        report["cached"] = False
        report["generated_at"] = now.isoformat()
        return jsonable_encoder(report)

    async def _compute(self, builder: Callable[[Session, datetime], dict]) -> dict:
        return await asyncio.to_thread(self._build, builder)

    async def compute_user_statistics(self) -> dict:
        return await self._compute(self._user_statistics)

    async def compute_product_statistics(self) -> dict:
        return await self._compute(self._product_statistics)

    async def compute_purchase_statistics(self) -> dict:
        return await self._compute(self._purchase_statistics)

    async def compute_review_statistics(self) -> dict:
        return await self._compute(self._review_statistics)

    async def compute_wishlist_statistics(self) -> dict:
        return await self._compute(self._wishlist_statistics)

    async def compute_category_statistics(self) -> dict:
        return await self._compute(self._category_statistics)

    async def compute_overall_statistics(self) -> dict:
        user_stats, product_stats, purchase_stats, review_stats, wishlist_stats, category_stats = await asyncio.gather(
            self.compute_user_statistics(),
            self.compute_product_statistics(),
            self.compute_purchase_statistics(),
            self.compute_review_statistics(),
            self.compute_wishlist_statistics(),
            self.compute_category_statistics(),
        )

        return {
            "overview": {
                "total_users": user_stats["total_users"],
                "total_products": product_stats["total_products"],
                "total_purchases": purchase_stats["total_purchases"],
                "total_reviews": review_stats["total_reviews"],
                "total_wishlist_items": wishlist_stats["total_wishlist_items"],
                "total_categories": category_stats["total_categories"],
                "total_revenue": purchase_stats["total_revenue"],
                "average_rating": review_stats["average_rating"],
            },
            "user_stats": user_stats,
            "product_stats": product_stats,
            "purchase_stats": purchase_stats,
            "review_stats": review_stats,
            "wishlist_stats": wishlist_stats,
            "category_stats": category_stats,
            "cached": False,
            "generated_at": self.clock().isoformat(),
        }

    def _optional(self, factory, db: Session, fetch: Callable[[Any], Any], fallback: Any, what: str) -> Any:
        """Run fetch against a collaborator built on db; fallback when it is absent or fails"""
        if factory is None:
            return fallback
        try:
            return fetch(factory(db))
        except Exception as e:
            logger.warning(f"Could not fetch {what}: {e}")
            db.rollback()
            return fallback

    # Report builders, run inside worker threads

    def _user_statistics(self, db: Session, now: datetime) -> dict:
        total_users = db.query(func.count(User.id)).scalar()
        active_users = db.query(func.count(User.id)).filter(User.is_active.is_(True)).scalar()
        new_this_month = db.query(func.count(User.id)).filter(User.created_at >= month_ago(now)).scalar()
        new_this_week = db.query(func.count(User.id)).filter(User.created_at >= week_ago(now)).scalar()

        year = extract("year", User.created_at)
        month = extract("month", User.created_at)
        trend_rows = db.query(year, month, func.count(User.id)).filter(
            User.created_at >= trailing_year_start(now)
        ).group_by(year, month).order_by(year, month).all()

        most_active_users = self._optional(
            self.purchases, db,
            lambda purchases: purchases.get_most_active_buyers(TOP_LIMIT),
            [], "most active users"
        )

        return {
            "total_users": total_users,
            "active_users": active_users,
            "inactive_users": total_users - active_users,
            "new_users_this_month": new_this_month,
            "new_users_this_week": new_this_week,
            "registration_trends": [
                {"year": int(y), "month": int(m), "count": count} for y, m, count in trend_rows
            ],
            "most_active_users": most_active_users,
            "user_growth_rate": percentage(new_this_month, total_users),
        }

    def _product_statistics(self, db: Session, now: datetime) -> dict:
        total_products = db.query(func.count(Product.id)).scalar()
        active_products = db.query(func.count(Product.id)).filter(Product.is_active.is_(True)).scalar()
        new_this_month = db.query(func.count(Product.id)).filter(Product.created_at >= month_ago(now)).scalar()

        priced, average_price, min_price, max_price, total_value = db.query(
            func.count(Product.id),
            func.avg(Product.price),
            func.min(Product.price),
            func.max(Product.price),
            func.sum(Product.price),
        ).filter(Product.is_active.is_(True)).one()

        product_count = func.count(Product.id).label("count")
        category_rows = db.query(Category.name, product_count, func.avg(Product.price)).select_from(Product).outerjoin(
            Category, Category.id == Product.category_id
        ).filter(
            Product.is_active.is_(True)
        ).group_by(Category.name).order_by(product_count.desc()).all()

        most_popular_products = self._optional(
            self.purchases, db,
            lambda purchases: purchases.get_most_purchased_products(TOP_LIMIT),
            [], "most popular products"
        )
        top_rated_products = self._optional(
            self.reviews, db,
            lambda reviews: reviews.get_top_rated_products(TOP_LIMIT),
            [], "top rated products"
        )

        return {
            "total_products": total_products,
            "active_products": active_products,
            "inactive_products": total_products - active_products,
            "new_products_this_month": new_this_month,
            "price_statistics": {
                "average_price": round2(average_price) if priced else 0,
                "min_price": round2(min_price) if priced else 0,
                "max_price": round2(max_price) if priced else 0,
                "total_value": round2(total_value) if priced else 0,
            },
            # Uncategorized and orphaned products share the null category
            "products_by_category": [
                {"category": name, "count": count, "average_price": round2(avg_price)}
                for name, count, avg_price in category_rows
            ],
            "most_popular_products": most_popular_products,
            "top_rated_products": top_rated_products,
        }

    def _purchase_statistics(self, db: Session, now: datetime) -> dict:
        if self.purchases is None:
            return {"message": "Purchases service not available", **empty_purchase_statistics()}

        try:
            purchases = self.purchases(db)
            total_purchases = purchases.count_purchases()
            completed_purchases = purchases.get_total_purchases()
            total_revenue = purchases.get_total_revenue()
            this_month = purchases.count_purchases(since=month_ago(now))

            return {
                "total_purchases": total_purchases,
                "completed_purchases": completed_purchases,
                "total_revenue": round2(total_revenue),
                "average_order_value": round2(total_revenue / completed_purchases) if completed_purchases else 0,
                "purchases_this_month": this_month,
                "purchases_this_week": purchases.count_purchases(since=week_ago(now)),
                "purchase_trends": purchases.get_monthly_trends(trailing_year_start(now)),
                "top_customers": purchases.get_top_customers(TOP_LIMIT),
                "revenue_growth_rate": percentage(this_month, total_purchases),
            }
        except Exception as e:
            logger.warning(f"Error fetching purchase statistics: {e}")
            db.rollback()
            return {"error": "Error fetching purchase statistics", **empty_purchase_statistics()}

    def _review_statistics(self, db: Session, now: datetime) -> dict:
        if self.reviews is None:
            return {"message": "Reviews service not available", **empty_review_statistics()}

        try:
            reviews = self.reviews(db)
            overall = reviews.get_review_statistics()
            this_month = reviews.count_reviews(since=month_ago(now))

            return {
                **overall,
                "reviews_this_month": this_month,
                "reviews_this_week": reviews.count_reviews(since=week_ago(now)),
                "top_rated_products": reviews.get_top_rated_products(TOP_LIMIT),
                "most_active_reviewers": reviews.get_most_active_reviewers(TOP_LIMIT),
                "review_growth_rate": percentage(this_month, overall["total_reviews"]),
            }
        except Exception as e:
            logger.warning(f"Error fetching review statistics: {e}")
            db.rollback()
            return {"error": "Error fetching review statistics", **empty_review_statistics()}

    def _wishlist_statistics(self, db: Session, now: datetime) -> dict:
        if self.wishlist is None:
            return {"message": "Wishlist service not available", **empty_wishlist_statistics()}

        try:
            wishlist = self.wishlist(db)
            total_items = wishlist.count_items()
            unique_users = wishlist.count_unique_users()
            total_users = db.query(func.count(User.id)).scalar()

            return {
                "total_wishlist_items": total_items,
                "unique_users_with_wishlists": unique_users,
                "average_wishlist_size": round2(total_items / unique_users) if unique_users else 0,
                "most_wishlisted_products": wishlist.get_popular_wishlist_products(TOP_LIMIT),
                "wishlist_trends": wishlist.get_monthly_trends(trailing_year_start(now)),
                "priority_distribution": wishlist.get_priority_distribution(),
                "wishlist_engagement_rate": percentage(unique_users, total_users),
            }
        except Exception as e:
            logger.warning(f"Error fetching wishlist statistics: {e}")
            db.rollback()
            return {"error": "Error fetching wishlist statistics", **empty_wishlist_statistics()}

    def _category_statistics(self, db: Session, now: datetime) -> dict:
        total_categories = db.query(func.count(Category.id)).scalar()
        active_categories = db.query(func.count(Category.id)).filter(Category.is_active.is_(True)).scalar()

        product_count = func.count(Product.id).label("product_count")
        count_rows = db.query(
            Product.category_id,
            Category.name,
            product_count,
            func.avg(Product.price),
            func.sum(Product.price),
        ).select_from(Product).outerjoin(
            Category, Category.id == Product.category_id
        ).filter(
            Product.is_active.is_(True)
        ).group_by(Product.category_id, Category.name).order_by(product_count.desc()).all()

        category_product_counts = [
            {
                "category_id": category_id,
                "category_name": name,
                "product_count": count,
                "average_price": round2(avg_price),
                "total_value": round2(total_value),
            }
            for category_id, name, count, avg_price, total_value in count_rows
        ]

        most_popular_categories = self._optional(
            self.purchases, db,
            lambda purchases: purchases.get_purchase_volume_by_category(TOP_LIMIT),
            [], "most popular categories"
        )

        has_active_products = exists().where(
            Product.category_id == Category.id,
            Product.is_active.is_(True)
        )
        empty_rows = db.query(Category.id, Category.name, Category.description, Category.created_at).filter(
            Category.is_active.is_(True),
            ~has_active_products
        ).order_by(Category.name).all()

        products_counted = sum(row["product_count"] for row in category_product_counts)

        return {
            "total_categories": total_categories,
            "active_categories": active_categories,
            "inactive_categories": total_categories - active_categories,
            "category_product_counts": category_product_counts,
            "most_popular_categories": most_popular_categories,
            "categories_with_no_products": [
                {"id": row.id, "name": row.name, "description": row.description, "created_at": row.created_at}
                for row in empty_rows
            ],
            "average_products_per_category": (
                round2(products_counted / len(category_product_counts)) if category_product_counts else 0
            ),
        }
