"""Rule results and behavioral feedback models."""
import datetime as dt
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class RuleResult(BaseModel):
    """Outcome of one rule for one evaluation."""

    rule_id: str = Field(..., description="Rule identifier")
    triggered: bool = Field(..., description="Whether the rule fired")
    data: Dict[str, Any] = Field(default_factory=dict, description="Numbers explaining the outcome")


class FeedbackCreate(BaseModel):
    """Feedback message ready to be stored."""

    user_id: int
    rule_id: str
    level: str = Field(..., description="Severity of the message: 'warning', 'info' or 'positive'")
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    week_start: dt.date


class FeedbackRecord(FeedbackCreate):
    """Stored feedback entry."""

    id: Optional[int] = None
    created_at: dt.datetime
