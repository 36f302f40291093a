# Package exports - these allow cleaner imports like:
# from storefront.models import Product, Category
# Used by alembic/env.py for migration autogenerate
from storefront.models.user import User
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.purchase import Purchase
from storefront.models.review import Review
from storefront.models.wishlist import WishlistItem
