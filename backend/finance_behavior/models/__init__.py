from .transaction import Category, CategoryCreate, Transaction, TransactionCreate, TransactionType
from .queries import CategoryLookup, DateRangeQuery, FeedbackTemplateInput
from .summary import OverallSummary, WeeklySummary
from .feedback import FeedbackCreate, FeedbackRecord, RuleResult
from .evaluation import (
    ErrorResponse,
    EvaluationPayload,
    EvaluationResponse,
    EvaluationResult,
    EvaluationWeeks,
    FeedbackHistoryResponse,
    OverallSummaryResponse,
    WeekRange,
    WeeklySummaryPayload,
    WeeklySummaryResponse,
)

__all__ = [
    "Category",
    "CategoryCreate",
    "Transaction",
    "TransactionCreate",
    "TransactionType",
    "CategoryLookup",
    "DateRangeQuery",
    "FeedbackTemplateInput",
    "OverallSummary",
    "WeeklySummary",
    "FeedbackCreate",
    "FeedbackRecord",
    "RuleResult",
    "ErrorResponse",
    "EvaluationPayload",
    "EvaluationResponse",
    "EvaluationResult",
    "EvaluationWeeks",
    "FeedbackHistoryResponse",
    "OverallSummaryResponse",
    "WeekRange",
    "WeeklySummaryPayload",
    "WeeklySummaryResponse",
]
