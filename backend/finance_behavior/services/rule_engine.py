"""Weekly spending rules."""
import logging
from datetime import datetime
from typing import Callable, List, Tuple

from finance_behavior.config import Settings
from finance_behavior.models.evaluation import EvaluationResult, EvaluationWeeks, WeekRange
from finance_behavior.models.feedback import RuleResult
from finance_behavior.models.queries import DateRangeQuery
from finance_behavior.models.summary import WeeklySummary
from finance_behavior.services.aggregation import TransactionAggregator
from finance_behavior.utils.dates import format_datetime, previous_week_bounds, week_bounds

logger = logging.getLogger(__name__)

WEEKLY_SPENDING_INCREASE = "weekly_spending_increase"
CATEGORY_CONCENTRATION = "category_concentration"
SMALL_TRANSACTIONS = "small_transactions"
WEEKLY_SPENDING_DECREASE = "weekly_spending_decrease"


def _percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 1)


def check_spending_increase(
    current: WeeklySummary, previous: WeeklySummary, settings: Settings
) -> RuleResult:
    """Spending rose by more than the configured ratio over last week."""
    data = {
        "current_total": current.total_expenses,
        "previous_total": previous.total_expenses,
        "threshold_percent": round(settings.spending_increase_ratio * 100, 1),
    }
    triggered = False
    if previous.total_expenses > 0:
        change = current.total_expenses - previous.total_expenses
        data["increase_percent"] = _percent(change, previous.total_expenses)
        triggered = current.total_expenses > previous.total_expenses * (1 + settings.spending_increase_ratio)
    return RuleResult(rule_id=WEEKLY_SPENDING_INCREASE, triggered=triggered, data=data)


def check_category_concentration(
    current: WeeklySummary, previous: WeeklySummary, settings: Settings
) -> RuleResult:
    """One category takes at least the configured share of the week's spending."""
    data = {
        "total_expenses": current.total_expenses,
        "threshold_percent": round(settings.category_concentration_ratio * 100, 1),
    }
    if current.total_expenses <= 0 or not current.category_totals:
        return RuleResult(rule_id=CATEGORY_CONCENTRATION, triggered=False, data=data)

    # category_totals is name-sorted, so ties resolve alphabetically
    category, category_total = max(current.category_totals.items(), key=lambda item: item[1])
    share = category_total / current.total_expenses
    data.update({
        "category": category,
        "category_total": category_total,
        "share_percent": _percent(category_total, current.total_expenses),
    })
    return RuleResult(
        rule_id=CATEGORY_CONCENTRATION,
        triggered=share >= settings.category_concentration_ratio,
        data=data,
    )


def check_small_transactions(
    current: WeeklySummary, previous: WeeklySummary, settings: Settings
) -> RuleResult:
    """Many purchases under the small-amount threshold."""
    return RuleResult(
        rule_id=SMALL_TRANSACTIONS,
        triggered=current.small_transaction_count >= settings.small_transaction_min_count,
        data={
            "count": current.small_transaction_count,
            "total": current.small_transaction_total,
            "threshold_amount": settings.small_transaction_threshold,
            "min_count": settings.small_transaction_min_count,
        },
    )


def check_spending_decrease(
    current: WeeklySummary, previous: WeeklySummary, settings: Settings
) -> RuleResult:
    """Spending fell by at least the configured ratio compared to last week."""
    data = {
        "current_total": current.total_expenses,
        "previous_total": previous.total_expenses,
        "threshold_percent": round(settings.spending_decrease_ratio * 100, 1),
    }
    triggered = False
    if previous.total_expenses > 0:
        change = previous.total_expenses - current.total_expenses
        data["decrease_percent"] = _percent(change, previous.total_expenses)
        triggered = current.total_expenses <= previous.total_expenses * (1 - settings.spending_decrease_ratio)
    return RuleResult(rule_id=WEEKLY_SPENDING_DECREASE, triggered=triggered, data=data)


Rule = Callable[[WeeklySummary, WeeklySummary, Settings], RuleResult]

DEFAULT_RULES: Tuple[Rule, ...] = (
    check_spending_increase,
    check_category_concentration,
    check_small_transactions,
    check_spending_decrease,
)


class RuleEngine:
    """Evaluates the spending rules for the week containing a target date."""

    def __init__(
        self,
        aggregator: TransactionAggregator,
        settings: Settings,
        rules: Tuple[Rule, ...] = DEFAULT_RULES,
    ):
        self.aggregator = aggregator
        self.settings = settings
        self.rules = rules

    def evaluate_rules(self, user_id: int, target_date: datetime) -> EvaluationResult:
        """
        Evaluate every rule against this week's and last week's aggregates.

        Args:
            user_id: User identifier
            target_date: Any moment inside the week to evaluate

        Returns:
            EvaluationResult listing all rules, triggered or not, with cached=False
        """
        current_start, current_end = week_bounds(target_date)
        previous_start, previous_end = previous_week_bounds(target_date)

        current = self.aggregator.get_weekly_summary(
            DateRangeQuery.of(user_id, current_start, current_end)
        )
        previous = self.aggregator.get_weekly_summary(
            DateRangeQuery.of(user_id, previous_start, previous_end)
        )

        results: List[RuleResult] = [rule(current, previous, self.settings) for rule in self.rules]

        logger.info(
            "Rules evaluated",
            extra={
                "user_id": user_id,
                "week_start": current_start,
                "triggered": [r.rule_id for r in results if r.triggered],
            },
        )

        return EvaluationResult(
            user_id=user_id,
            evaluation_date=format_datetime(target_date),
            weeks=EvaluationWeeks(
                current=WeekRange(start=current_start, end=current_end),
                previous=WeekRange(start=previous_start, end=previous_end),
            ),
            triggered_rules=results,
            cached=False,
        )
