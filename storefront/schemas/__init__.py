# Package exports - these allow cleaner imports like:
# from storefront.schemas import ProductCreate, ProductResponse
from storefront.schemas.auth import RegisterRequest, LoginRequest, RefreshTokenRequest, TokenResponse, MessageResponse
from storefront.schemas.user import UserCreate, UserUpdate, UserResponse, UserSummary, UserProfileResponse
from storefront.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from storefront.schemas.product import ProductCreate, ProductUpdate, ProductResponse, ProductSummary, ProductListResponse
from storefront.schemas.purchase import PurchaseCreate, PurchaseResponse
from storefront.schemas.review import ReviewCreate, ReviewUpdate, ReviewResponse, RatingStats, TopRatedProduct
from storefront.schemas.wishlist import WishlistAdd, WishlistUpdate, WishlistItemResponse, WishlistUserStatistics, PopularWishlistProduct
