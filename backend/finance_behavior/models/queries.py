"""Immutable query objects passed between services and storage."""
import datetime as dt
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from finance_behavior.models.transaction import TransactionType


class DateRangeQuery(BaseModel):
    """A user's transactions between two calendar days, both inclusive."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def _check_order(self) -> "DateRangeQuery":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    @classmethod
    def of(cls, user_id: int, start_date: dt.date, end_date: dt.date) -> "DateRangeQuery":
        return cls(user_id=user_id, start_date=start_date, end_date=end_date)


class CategoryLookup(BaseModel):
    """Find a category by name and type, visible to a user."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TransactionType
    user_id: Optional[int] = None


class FeedbackTemplateInput(BaseModel):
    """Everything needed to render one feedback message."""

    model_config = ConfigDict(frozen=True)

    template: Dict[str, str] = Field(..., description="Template with 'title' and 'message'")
    data: Dict[str, Any] = Field(default_factory=dict, description="Values for template placeholders")
    user_id: int
    rule_id: str
    level: str
