from .aggregation import TransactionAggregator
from .rule_engine import RuleEngine
from .feedback_engine import FeedbackEngine
from .evaluation import RuleEvaluationDecision

__all__ = [
    "TransactionAggregator",
    "RuleEngine",
    "FeedbackEngine",
    "RuleEvaluationDecision",
]
