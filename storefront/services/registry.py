from dataclasses import dataclass
from sqlalchemy.orm import Session

from storefront.services.user_service import UserService
from storefront.services.product_service import ProductService
from storefront.services.category_service import CategoryService
from storefront.services.purchase_service import PurchaseService
from storefront.services.review_service import ReviewService
from storefront.services.wishlist_service import WishlistService
from storefront.services.auth_service import AuthService


@dataclass
class ServiceRegistry:
    users: UserService
    products: ProductService
    categories: CategoryService
    purchases: PurchaseService
    reviews: ReviewService
    wishlist: WishlistService
    auth: AuthService


def build_services(db: Session) -> ServiceRegistry:
    """Wire every domain service, and their cross-references, on one session"""
    users = UserService(db)
    products = ProductService(db)
    categories = CategoryService(db, products=products)
    purchases = PurchaseService(db, users=users, products=products)
    reviews = ReviewService(db, users=users, products=products)
    wishlist = WishlistService(db, users=users, products=products)

    users.purchases = purchases
    users.reviews = reviews
    users.wishlist = wishlist
    products.categories = categories
    products.purchases = purchases
    products.reviews = reviews

    return ServiceRegistry(
        users=users,
        products=products,
        categories=categories,
        purchases=purchases,
        reviews=reviews,
        wishlist=wishlist,
        auth=AuthService(users),
    )
