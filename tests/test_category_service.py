import uuid
import pytest
from pydantic import ValidationError

from storefront.exceptions import ConflictError, NotFoundError
from storefront.models import Category
from storefront.services.persistence import commit_unique
from storefront.schemas.category import CategoryCreate, CategoryUpdate


def test_create_and_find(services):
    category = services.categories.create(CategoryCreate(name="Books", description="Paper"))

    assert category.is_active is True
    assert services.categories.find_one(category.id).name == "Books"


def test_duplicate_name_conflicts(services, make_category):
    make_category(name="Books")

    with pytest.raises(ConflictError):
        services.categories.create(CategoryCreate(name="Books", description="Again"))


def test_rename_onto_existing_name_conflicts(services, make_category):
    make_category(name="Books")
    games = make_category(name="Games")

    with pytest.raises(ConflictError):
        services.categories.update(games.id, CategoryUpdate(name="Books"))

    renamed = services.categories.update(games.id, CategoryUpdate(name="Board Games"))
    assert renamed.name == "Board Games"


def test_find_all_lists_active_only(services, make_category):
    make_category(name="Books")
    make_category(name="Retired", is_active=False)

    assert [category.name for category in services.categories.find_all()] == ["Books"]


def test_delete_leaves_products_pointing_at_missing_category(services, db, make_category, make_product):
    category = make_category(name="Books")
    product = make_product(category=category)

    services.categories.remove(category.id)

    db.expire_all()
    product = services.products.find_one(product.id)
    assert product.category_id == category.id
    assert services.products.product_to_response_dict(product)["category"] is None
    with pytest.raises(NotFoundError):
        services.categories.find_one(category.id)


def test_category_products(services, make_category, make_product):
    category = make_category()
    make_product(name="Listed", category=category)
    make_product(name="Hidden", category=category, is_active=False)
    make_product(name="Elsewhere")

    products = services.categories.get_category_products(category.id)

    assert [product.name for product in products] == ["Listed"]
    with pytest.raises(NotFoundError):
        services.categories.get_category_products(uuid.uuid4())


def test_unique_violation_on_commit_becomes_conflict(services, db, make_category):
    make_category(name="Books")
    db.add(Category(name="Books", description="Inserted after the duplicate check"))

    with pytest.raises(ConflictError, match="already exists"):
        commit_unique(db, "Category with this name already exists")

    assert [category.name for category in services.categories.find_all()] == ["Books"]


def test_update_schema_refuses_nulls_and_blanks():
    with pytest.raises(ValidationError):
        CategoryUpdate(name=None)
    with pytest.raises(ValidationError):
        CategoryUpdate(description="")
    assert CategoryUpdate().model_dump(exclude_unset=True) == {}
