from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=255)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=255)


class CategoryOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    product_count: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


class CategoryList(BaseModel):
    categories: list[CategoryOut]
    total: int
    limit: int
    offset: int
