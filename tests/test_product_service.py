import uuid
import pytest
from pydantic import ValidationError

from storefront.exceptions import NotFoundError
from storefront.schemas.product import ProductCreate, ProductUpdate


def test_create_checks_category(services, make_category):
    with pytest.raises(NotFoundError, match="Category not found"):
        services.products.create(ProductCreate(name="Lamp", description="Bright", price=20, category_id=uuid.uuid4()))

    category = make_category(name="Home")
    product = services.products.create(ProductCreate(name="Lamp", description="Bright", price=20, category_id=category.id))

    assert product.category.name == "Home"
    assert (product.total_purchases, product.average_rating, product.total_reviews) == (0, 0, 0)


def test_update_checks_category(services, make_product):
    product = make_product()

    with pytest.raises(NotFoundError):
        services.products.update(product.id, ProductUpdate(category_id=uuid.uuid4()))

    updated = services.products.update(product.id, ProductUpdate(price=12.5, is_active=False))
    assert (updated.price, updated.is_active) == (12.5, False)


def test_find_all_filters(services, make_category, make_product):
    toys = make_category(name="Toys")
    make_product(name="Red Car", price=5.0, category=toys)
    make_product(name="Blue Car", price=50.0, category=toys)
    make_product(name="Lamp", price=20.0)
    make_product(name="Old Car", price=7.0, is_active=False)

    assert services.products.find_all().total == 3
    assert services.products.find_all(price_min=10).total == 2
    assert services.products.find_all(price_max=10).total == 1
    assert services.products.find_all(category_id=toys.id).total == 2
    assert services.products.find_all(q="car").total == 2
    assert services.products.find_all(q="car", price_min=10).products[0].name == "Blue Car"


def test_find_all_pagination(services, make_product):
    for index in range(5):
        make_product(name=f"Item {index}")

    first = services.products.find_all(page=1, page_size=2)
    last = services.products.find_all(page=3, page_size=2)

    assert (first.total, len(first.products), first.has_next) == (5, 2, True)
    assert (len(last.products), last.has_next) == (1, False)


def test_search_matches_description(services, make_product):
    services.products.create(ProductCreate(name="Kettle", description="Boils water fast", price=30))
    make_product(name="Toaster")

    assert [product.name for product in services.products.search("WATER")] == ["Kettle"]


def test_response_dict_includes_review_stats(services, make_product):
    product = make_product()

    response = services.products.product_to_response_dict(product)

    assert response["category"] is None
    assert response["review_stats"]["total_reviews"] == 0


def test_update_rating_ignores_edits(services, db, make_product):
    product = make_product(average_rating=4.0, total_reviews=2)

    services.products.update_rating(product.id, 1, is_new_review=False)
    db.refresh(product)
    assert (product.average_rating, product.total_reviews) == (4.0, 2)

    services.products.update_rating(product.id, 1)
    db.refresh(product)
    assert (product.average_rating, product.total_reviews) == (3.0, 3)


def test_popular_products(services, make_product):
    make_product(name="Quiet", total_purchases=1)
    make_product(name="Loved", total_purchases=9, average_rating=4.0)
    make_product(name="Hyped", total_purchases=9, average_rating=4.5)
    make_product(name="Gone", total_purchases=50, is_active=False)

    names = [product.name for product in services.products.get_popular_products(limit=2)]

    assert names == ["Hyped", "Loved"]


def test_remove_and_missing(services, make_product):
    product = make_product()

    services.products.remove(product.id)

    with pytest.raises(NotFoundError, match="Product not found"):
        services.products.find_one(product.id)
    with pytest.raises(NotFoundError):
        services.products.get_product_purchases(product.id)


def test_update_schema_refuses_nulls_but_allows_uncategorizing(services, make_category, make_product):
    with pytest.raises(ValidationError):
        ProductUpdate(price=None)
    with pytest.raises(ValidationError):
        ProductUpdate(description="")

    product = make_product(category=make_category())
    updated = services.products.update(product.id, ProductUpdate(category_id=None))

    assert updated.category_id is None
    assert updated.category is None
