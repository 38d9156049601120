from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status
from typing import Dict, Any
import logging

from app.modules.categories.models import Category
from app.modules.categories.schemas import CategoryCreate, CategoryUpdate, CategoryOut
from app.modules.ledger.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class CategoryService:
    """Product category management"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def to_out(category: Category) -> CategoryOut:
        return CategoryOut(
            id=category.id,
            name=category.name,
            description=category.description,
            product_count=len(category.products),
            created_at=category.created_at
        )

    def create_category(self, data: CategoryCreate) -> CategoryOut:
        """
        Create a category with a unique name

        Args:
            data: Category data

        Returns:
            CategoryOut: The created category
        """
        existing = self.db.query(Category).filter(Category.name == data.name).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"A category named '{data.name}' already exists"
            )

        try:
            category = Category(name=data.name, description=data.description)
            self.db.add(category)
            self.db.commit()
            self.db.refresh(category)
            return self.to_out(category)
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Database integrity error"
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating category: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Internal error: {str(e)}"
            )

    def get_all_categories(self, limit: int = 100, offset: int = 0) -> Dict[str, Any]:
        """List categories with pagination"""
        query = self.db.query(Category).order_by(Category.name)
        total = query.count()
        categories = query.offset(offset).limit(limit).all()

        return {
            "categories": [self.to_out(c) for c in categories],
            "total": total,
            "limit": limit,
            "offset": offset
        }

    def get_category_by_id(self, category_id: int) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    def update_category(self, category_id: int, data: CategoryUpdate) -> CategoryOut:
        category = self.get_category_by_id(category_id)

        if data.name and data.name != category.name:
            existing = self.db.query(Category).filter(
                Category.name == data.name,
                Category.id != category_id
            ).first()
            if existing:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Another category is already named '{data.name}'"
                )

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(category, field, value)

        try:
            self.db.commit()
            self.db.refresh(category)
            return self.to_out(category)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating category {category_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error updating category: {str(e)}"
            )

    def delete_category(self, category_id: int) -> Dict[str, str]:
        category = self.get_category_by_id(category_id)

        if category.products:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Category has {len(category.products)} products assigned"
            )

        self.db.delete(category)
        self.db.commit()
        return {"message": "Category deleted"}
