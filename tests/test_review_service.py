import uuid
import pytest
from pydantic import ValidationError

from storefront.exceptions import ConflictError, ForbiddenError, NotFoundError
from storefront.models import Review
from storefront.schemas.review import ReviewCreate, ReviewUpdate
from storefront.services.persistence import commit_unique


def review_for(user, rating=5, comment="Great"):
    return ReviewCreate(user_id=user.id, rating=rating, comment=comment)


def test_create_review_updates_running_average(services, db, make_user, make_product):
    product = make_product(average_rating=4.5, total_reviews=10)

    services.reviews.create_review(product.id, review_for(make_user(), rating=5))

    db.refresh(product)
    assert product.average_rating == 4.55
    assert product.total_reviews == 11


def test_first_review_sets_average(services, db, make_user, make_product):
    product = make_product()

    services.reviews.create_review(product.id, review_for(make_user(), rating=3))

    db.refresh(product)
    assert (product.average_rating, product.total_reviews) == (3, 1)


def test_duplicate_review_conflicts(services, make_user, make_product):
    user = make_user()
    product = make_product()
    services.reviews.create_review(product.id, review_for(user))

    with pytest.raises(ConflictError, match="already reviewed"):
        services.reviews.create_review(product.id, review_for(user, rating=1))


def test_soft_deleted_review_still_blocks_a_new_one(services, make_user, make_product):
    user = make_user()
    product = make_product()
    review = services.reviews.create_review(product.id, review_for(user))
    services.reviews.delete_review(review.id, user_id=str(user.id))

    with pytest.raises(ConflictError):
        services.reviews.create_review(product.id, review_for(user))


def test_create_review_requires_user_and_product(services, make_user, make_product):
    with pytest.raises(NotFoundError, match="User not found"):
        services.reviews.create_review(make_product().id, ReviewCreate(user_id=uuid.uuid4(), rating=4, comment="x"))
    with pytest.raises(NotFoundError, match="Product not found"):
        services.reviews.create_review(uuid.uuid4(), review_for(make_user()))


def test_only_author_may_update(services, make_user, make_product):
    author = make_user()
    review = services.reviews.create_review(make_product().id, review_for(author))

    with pytest.raises(ForbiddenError, match="only update your own"):
        services.reviews.update_review(review.id, ReviewUpdate(comment="hijacked"), user_id=str(make_user().id))

    updated = services.reviews.update_review(review.id, ReviewUpdate(rating=2), user_id=str(author.id))
    assert updated.rating == 2
    assert updated.comment == "Great"


def test_update_does_not_touch_product_rating(services, db, make_user, make_product):
    author = make_user()
    product = make_product()
    review = services.reviews.create_review(product.id, review_for(author, rating=5))

    services.reviews.update_review(review.id, ReviewUpdate(rating=1), user_id=str(author.id))

    db.refresh(product)
    assert product.average_rating == 5


def test_delete_is_soft(services, db, make_user, make_product):
    author = make_user()
    product = make_product()
    review = services.reviews.create_review(product.id, review_for(author))

    with pytest.raises(ForbiddenError, match="only delete your own"):
        services.reviews.delete_review(review.id, user_id=str(make_user().id))

    services.reviews.delete_review(review.id, user_id=str(author.id))

    db.refresh(review)
    assert review.is_active is False
    with pytest.raises(NotFoundError):
        services.reviews.get_review_by_id(review.id)
    assert services.reviews.get_product_reviews(product.id) == []


def test_admin_delete_skips_author_check(services, make_user, make_product):
    review = services.reviews.create_review(make_product().id, review_for(make_user()))

    services.reviews.delete_review(review.id)

    with pytest.raises(NotFoundError):
        services.reviews.get_review_by_id(review.id)


def test_filters(services, make_user, make_product):
    product = make_product()
    other_product = make_product(name="Other")
    users = [make_user() for _ in range(3)]
    for user, rating in zip(users, (5, 4, 5)):
        services.reviews.create_review(product.id, review_for(user, rating=rating))
    services.reviews.create_review(other_product.id, review_for(users[0], rating=1))

    assert len(services.reviews.get_product_reviews(product.id, rating=5)) == 2
    assert len(services.reviews.get_product_reviews(product.id, user_id=users[1].id)) == 1
    assert len(services.reviews.get_all_reviews(limit=2)) == 2
    assert len(services.reviews.get_all_reviews(offset=3)) == 1
    assert len(services.reviews.get_user_reviews(users[0].id)) == 2
    assert len(services.reviews.get_user_reviews(users[0].id, product_id=other_product.id)) == 1

    with pytest.raises(NotFoundError):
        services.reviews.get_user_reviews(uuid.uuid4())


def test_rating_stats(services, make_user, make_product):
    product = make_product()
    for rating in (5, 4, 4, 1):
        services.reviews.create_review(product.id, review_for(make_user(), rating=rating))

    stats = services.reviews.get_product_rating_stats(product.id)

    assert stats == {
        "total_reviews": 4,
        "average_rating": 3.5,
        "rating_distribution": {"1": 1, "2": 0, "3": 0, "4": 2, "5": 1},
    }
    assert services.reviews.get_product_rating_stats(make_product(name="Unreviewed").id)["total_reviews"] == 0


def test_top_rated_products_order(services, make_user, make_product):
    solid = make_product(name="Solid")
    perfect_few = make_product(name="PerfectFew")
    perfect_many = make_product(name="PerfectMany")
    make_product(name="Unreviewed")
    users = [make_user() for _ in range(3)]
    services.reviews.create_review(solid.id, review_for(users[0], rating=4))
    services.reviews.create_review(perfect_few.id, review_for(users[0], rating=5))
    services.reviews.create_review(perfect_many.id, review_for(users[1], rating=5))
    services.reviews.create_review(perfect_many.id, review_for(users[2], rating=5))

    top = services.reviews.get_top_rated_products(limit=10)

    assert [row["product"]["name"] for row in top] == ["PerfectMany", "PerfectFew", "Solid"]
    assert top[0]["total_reviews"] == 2
    assert top[0]["average_rating"] == 5.0


def test_concurrent_duplicate_review_is_a_conflict(services, db, make_user, make_product):
    user = make_user()
    product = make_product()
    services.reviews.create_review(product.id, review_for(user))
    db.add(Review(user_id=user.id, product_id=product.id, rating=2, comment="Raced"))

    with pytest.raises(ConflictError):
        commit_unique(db, "User has already reviewed this product")

    assert len(services.reviews.get_product_reviews(product.id)) == 1


def test_update_schema_refuses_nulls_and_blanks():
    with pytest.raises(ValidationError):
        ReviewUpdate(rating=None)
    with pytest.raises(ValidationError):
        ReviewUpdate(comment="")
