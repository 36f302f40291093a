from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from storefront.models.category import Category
from storefront.schemas.category import CategoryCreate, CategoryUpdate
from storefront.services.persistence import commit_unique
from storefront.exceptions import NotFoundError, ConflictError

logger = logging.getLogger(__name__)


class CategoryService:
    """Service layer for category operations"""

    def __init__(self, db: Session, products=None):
        self.db = db
        self.products = products

    def create(self, category_data: CategoryCreate) -> Category:
        existing = self.db.query(Category).filter(Category.name == category_data.name).first()
        if existing:
            raise ConflictError("Category with this name already exists")

        category = Category(name=category_data.name, description=category_data.description)
        self.db.add(category)
        commit_unique(self.db, "Category with this name already exists")
        self.db.refresh(category)

        logger.info(f"Created category {category.id} ({category.name})")
        return category

    def find_all(self) -> List[Category]:
        """List active categories, newest first"""
        return self.db.query(Category).filter(
            Category.is_active.is_(True)
        ).order_by(Category.created_at.desc()).all()

    def find_one(self, category_id: UUID) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError("Category not found")
        return category

    def update(self, category_id: UUID, category_data: CategoryUpdate) -> Category:
        category = self.find_one(category_id)
        update_data = category_data.model_dump(exclude_unset=True)

        new_name = update_data.get("name")
        if new_name and new_name != category.name:
            existing = self.db.query(Category).filter(
                Category.name == new_name,
                Category.id != category.id
            ).first()
            if existing:
                raise ConflictError("Category with this name already exists")

        for field, value in update_data.items():
            setattr(category, field, value)

        commit_unique(self.db, "Category with this name already exists")
        self.db.refresh(category)
        return category

    def remove(self, category_id: UUID) -> None:
        """Hard delete; products keep pointing at the removed id"""
        category = self.find_one(category_id)
        self.db.delete(category)
        self.db.commit()
        logger.info(f"Deleted category {category_id}")

    def get_category_products(self, category_id: UUID) -> list:
        self.find_one(category_id)
        if self.products:
            return self.products.get_products_by_category(category_id)
        return []
