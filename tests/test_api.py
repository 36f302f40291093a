import uuid
import pytest

from storefront.schemas.purchase import PurchaseCreate
from storefront.schemas.review import ReviewCreate


@pytest.fixture
def user(make_user):
    return make_user(email="ada@example.com", name="Ada")


@pytest.fixture
def headers(auth_headers, user):
    return auth_headers(user)


def test_health_and_root_are_public(client):
    health = client.get("/health")
    root = client.get("/")

    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert health.json()["statistics_cache"] == "memory"
    assert root.json()["version"] == "1.0.0"


@pytest.mark.parametrize("path", ["/users", "/products", "/categories", "/purchases", "/stats/overview"])
def test_protected_routes_need_a_token(client, path):
    assert client.get(path).status_code in (401, 403)


def test_garbage_token_rejected(client):
    response = client.get("/products", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_register_login_profile_flow(client):
    registered = client.post("/auth/register", json={"email": "grace@example.com", "password": "secret123", "name": "Grace"})
    assert registered.status_code == 201

    login = client.post("/auth/login", json={"email": "grace@example.com", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    profile = client.get("/users/profile", headers={"Authorization": f"Bearer {token}"})
    assert profile.status_code == 200
    assert profile.json()["email"] == "grace@example.com"

    user_id = registered.json()["user"]["id"]
    detailed = client.get(f"/users/{user_id}/profile", headers={"Authorization": f"Bearer {token}"})
    assert detailed.json()["statistics"]["total_purchases"] == 0

    refreshed = client.post("/auth/refresh", json={"refresh_token": login.json()["refresh_token"]})
    assert refreshed.status_code == 200

    logout = client.post("/auth/logout", headers={"Authorization": f"Bearer {token}"})
    assert logout.json() == {"message": "Logout successful"}


def test_bad_login_and_duplicate_registration(client, user):
    assert client.post("/auth/login", json={"email": "ada@example.com", "password": "nope-nope"}).status_code == 401

    duplicate = client.post("/auth/register", json={"email": "ada@example.com", "password": "secret123", "name": "Ada"})
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "User with this email already exists"


def test_category_and_product_crud(client, headers):
    category = client.post("/categories", json={"name": "Toys", "description": "Fun"}, headers=headers)
    assert category.status_code == 201
    category_id = category.json()["id"]

    created = client.post(
        "/products",
        json={"name": "Robot", "description": "Beeps", "price": 49.5, "category_id": category_id},
        headers=headers,
    )
    assert created.status_code == 201
    product_id = created.json()["id"]
    assert created.json()["category"]["name"] == "Toys"

    listing = client.get("/products", params={"price_min": 40}, headers=headers).json()
    assert listing["total"] == 1
    assert listing["products"][0]["id"] == product_id

    updated = client.put(f"/products/{product_id}", json={"price": 39.0}, headers=headers)
    assert updated.json()["price"] == 39.0

    deleted = client.delete(f"/categories/{category_id}", headers=headers)
    assert deleted.json() == {"message": "Category deleted successfully"}
    assert client.get(f"/products/{product_id}", headers=headers).json()["category"] is None

    assert client.delete(f"/products/{product_id}", headers=headers).status_code == 200
    assert client.get(f"/products/{product_id}", headers=headers).status_code == 404


def test_static_product_routes_are_not_ids(client, headers, make_product):
    make_product(name="Searchable")

    assert client.get("/products/categories", headers=headers).status_code == 200
    assert client.get("/products/popular", headers=headers).status_code == 200
    search = client.get("/products/search", params={"q": "search"}, headers=headers)
    assert [product["name"] for product in search.json()] == ["Searchable"]


def test_invalid_price_is_rejected(client, headers):
    response = client.post("/products", json={"name": "Free", "description": "Nothing", "price": 0}, headers=headers)

    assert response.status_code == 422


def test_purchase_and_cancel(client, headers, user, make_product):
    product = make_product(price=15.0)

    created = client.post("/purchases", json={"user_id": str(user.id), "product_id": str(product.id)}, headers=headers)
    assert created.status_code == 201
    assert created.json()["price"] == 15.0
    purchase_id = created.json()["id"]

    assert client.delete(f"/purchases/{purchase_id}", headers=headers).json() == {
        "message": "Purchase cancelled successfully"
    }
    again = client.delete(f"/purchases/{purchase_id}", headers=headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Purchase is already cancelled"


def test_reviews_belong_to_their_author(client, headers, auth_headers, user, make_user, make_product):
    product = make_product()
    created = client.post(
        f"/products/{product.id}/reviews",
        json={"user_id": str(user.id), "rating": 4, "comment": "Solid"},
        headers=headers,
    )
    assert created.status_code == 201
    review_id = created.json()["id"]

    intruder = auth_headers(make_user())
    forbidden = client.put(f"/reviews/{review_id}", json={"comment": "Mine now"}, headers=intruder)
    assert forbidden.status_code == 403

    duplicate = client.post(
        f"/products/{product.id}/reviews",
        json={"user_id": str(user.id), "rating": 1, "comment": "Again"},
        headers=headers,
    )
    assert duplicate.status_code == 409

    assert client.delete(f"/reviews/{review_id}", headers=headers).status_code == 200
    assert client.get(f"/reviews/{review_id}", headers=headers).status_code == 404


def test_wishlist_routes(client, headers, user, make_product):
    product = make_product()
    base = f"/users/{user.id}/wishlist"

    added = client.post(base, json={"product_id": str(product.id)}, headers=headers)
    assert added.status_code == 201
    assert added.json()["priority"] == "medium"

    assert client.post(base, json={"product_id": str(product.id)}, headers=headers).status_code == 409
    assert client.post(base, json={"product_id": str(product.id), "priority": "urgent"}, headers=headers).status_code == 422
    assert client.get(f"{base}/statistics", headers=headers).json()["total_items"] == 1

    moved = client.post(f"{base}/{product.id}/move-to-cart", headers=headers)
    assert moved.json() == {"message": "Product moved to cart successfully"}
    assert client.get(f"{base}/{product.id}", headers=headers).status_code == 404


def test_statistics_overview_is_cached(client, headers, services, user, make_product):
    product = make_product(price=20.0)

    first = client.get("/stats/overview", headers=headers).json()
    services.purchases.create(PurchaseCreate(user_id=user.id, product_id=product.id))
    second = client.get("/stats/overview", headers=headers).json()

    assert first["cached"] is False
    assert second["cached"] is True
    assert second["overview"]["total_purchases"] == 0

    invalidated = client.post("/stats/cache/invalidate/purchases", headers=headers)
    assert invalidated.json() == {"message": "Purchase statistics cache invalidated successfully"}

    third = client.get("/stats/overview", headers=headers).json()
    assert third["cached"] is False
    assert third["overview"]["total_purchases"] == 1


def test_invalidate_all_and_unknown_topic(client, headers):
    assert client.post("/stats/cache/invalidate/all", headers=headers).json() == {
        "message": "All statistics cache invalidated successfully"
    }
    assert client.post("/stats/cache/invalidate/overview", headers=headers).status_code == 422
    assert client.post(f"/stats/cache/invalidate/{uuid.uuid4()}", headers=headers).status_code == 422


def test_updates_refuse_null_and_blank_fields(client, headers, services, user, make_category, make_product):
    category = make_category(name="Toys")
    product = make_product(category=category)
    review = services.reviews.create_review(product.id, ReviewCreate(user_id=user.id, rating=4, comment="Fine"))

    assert client.put(f"/products/{product.id}", json={"price": None}, headers=headers).status_code == 422
    assert client.put(f"/products/{product.id}", json={"description": ""}, headers=headers).status_code == 422
    assert client.put(f"/reviews/{review.id}", json={"rating": None}, headers=headers).status_code == 422
    assert client.put(f"/reviews/{review.id}", json={"comment": ""}, headers=headers).status_code == 422
    assert client.put(f"/categories/{category.id}", json={"name": None}, headers=headers).status_code == 422
    assert client.put(f"/users/{user.id}", json={"email": None}, headers=headers).status_code == 422
    assert client.put(
        f"/users/{user.id}/wishlist/{product.id}", json={"priority": None}, headers=headers
    ).status_code == 422

    uncategorized = client.put(f"/products/{product.id}", json={"category_id": None}, headers=headers)
    assert uncategorized.status_code == 200
    assert uncategorized.json()["category"] is None
    assert client.get(f"/products/{product.id}", headers=headers).json()["price"] == product.price


def test_review_listing_filters(client, headers, services, user, make_user, make_product):
    other = make_user(name="Other")
    lamp, chair = make_product(name="Lamp"), make_product(name="Chair")
    for author, product, rating in ((user, lamp, 5), (other, lamp, 3), (user, chair, 4)):
        services.reviews.create_review(product.id, ReviewCreate(user_id=author.id, rating=rating, comment="Noted"))

    def listing(path, **params):
        response = client.get(path, params=params, headers=headers)
        assert response.status_code == 200
        return response.json()

    by_rating = listing(f"/products/{lamp.id}/reviews", rating=5)
    assert [review["user_id"] for review in by_rating] == [str(user.id)]
    by_author = listing(f"/products/{lamp.id}/reviews", user_id=str(other.id))
    assert [review["rating"] for review in by_author] == [3]

    assert [review["rating"] for review in listing(f"/users/{user.id}/reviews", product_id=str(chair.id))] == [4]
    assert len(listing(f"/users/{user.id}/reviews", limit=1)) == 1

    assert len(listing("/admin/reviews")) == 3
    pair = listing("/admin/reviews", user_id=str(user.id), product_id=str(lamp.id))
    assert [review["rating"] for review in pair] == [5]
    assert [review["rating"] for review in listing("/admin/reviews", rating=4)] == [4]

    statistics = listing("/admin/reviews/statistics")
    assert statistics["total_reviews"] == 3
    assert statistics["average_rating"] == 4.0
    assert statistics["rating_distribution"]["3"] == 1

    top = listing("/admin/reviews/top-rated-products", limit=1)
    assert [row["product"]["name"] for row in top] == ["Lamp"]

    assert client.get(f"/products/{lamp.id}/reviews", params={"rating": 6}, headers=headers).status_code == 422
