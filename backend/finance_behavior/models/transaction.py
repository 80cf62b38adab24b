"""Transaction and category data models."""
import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionType(str, Enum):
    """Direction of a transaction; amounts themselves are never negative."""

    INCOME = "income"
    EXPENSE = "expense"


class CategoryCreate(BaseModel):
    """Category creation model."""

    user_id: Optional[int] = Field(None, description="Owner, or None for a shared default category")
    name: str = Field(..., min_length=1, description="Display name")
    type: TransactionType = Field(..., description="Transaction type this category classifies")
    color: str = Field(default="#9E9E9E", description="Display color")
    icon: str = Field(default="tag", description="Display icon")
    is_default: bool = Field(default=False, description="Shared default category")


class Category(CategoryCreate):
    """Stored category."""

    id: int


class TransactionCreate(BaseModel):
    """Transaction creation model."""

    user_id: int = Field(..., description="User identifier")
    category_id: Optional[int] = Field(None, description="Category identifier")
    type: TransactionType = Field(..., description="'income' or 'expense'")
    amount: float = Field(..., ge=0, description="Non-negative amount; direction is carried by type")
    date: dt.date = Field(..., description="Calendar day of the transaction")
    description: str = Field(default="", description="Free-text description")
    updated_at: Optional[dt.datetime] = Field(
        None, description="Last modification time; defaults to the insert time"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": 1,
                "category_id": 3,
                "type": "expense",
                "amount": 7.5,
                "date": "2024-06-12",
                "description": "Flat white",
            }
        }
    )


class Transaction(BaseModel):
    """Stored transaction, with its category name resolved when the category exists."""

    id: int
    user_id: int
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    type: TransactionType
    amount: float
    date: dt.date
    description: str = ""
    created_at: dt.datetime
    updated_at: dt.datetime
