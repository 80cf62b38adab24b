"""Evaluation result and API response models."""
import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from finance_behavior.models.feedback import FeedbackRecord, RuleResult
from finance_behavior.models.summary import OverallSummary, WeeklySummary


class WeekRange(BaseModel):
    """Monday to Sunday of one ISO week."""

    start: dt.date
    end: dt.date


class EvaluationWeeks(BaseModel):
    current: WeekRange
    previous: Optional[WeekRange] = None


class EvaluationResult(BaseModel):
    """Rules evaluated for a user and the week containing a target date."""

    user_id: int
    evaluation_date: str = Field(..., description="Target date as 'YYYY-MM-DD HH:MM:SS'")
    weeks: EvaluationWeeks
    triggered_rules: List[RuleResult] = Field(default_factory=list)
    cached: bool = Field(..., description="True when rebuilt from stored feedback")

    @property
    def week_start(self) -> dt.date:
        return self.weeks.current.start


class EvaluationPayload(BaseModel):
    evaluation: EvaluationResult
    feedback: List[FeedbackRecord] = Field(default_factory=list)


class EvaluationResponse(BaseModel):
    success: bool = True
    data: EvaluationPayload


class WeeklySummaryPayload(BaseModel):
    weeks: EvaluationWeeks
    summary: WeeklySummary


class WeeklySummaryResponse(BaseModel):
    success: bool = True
    data: WeeklySummaryPayload


class OverallSummaryResponse(BaseModel):
    success: bool = True
    data: OverallSummary


class FeedbackHistoryResponse(BaseModel):
    success: bool = True
    data: List[FeedbackRecord] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    success: bool = False
    error: Dict[str, Any]
