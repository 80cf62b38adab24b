"""Turns triggered rules into stored behavioral feedback."""
import logging
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from finance_behavior.models.evaluation import EvaluationResult
from finance_behavior.models.feedback import FeedbackCreate, FeedbackRecord
from finance_behavior.models.queries import FeedbackTemplateInput
from finance_behavior.services.rule_engine import (
    CATEGORY_CONCENTRATION,
    SMALL_TRANSACTIONS,
    WEEKLY_SPENDING_DECREASE,
    WEEKLY_SPENDING_INCREASE,
)
from finance_behavior.storage.base import FeedbackHistoryStore
from finance_behavior.utils.dates import utcnow

logger = logging.getLogger(__name__)


class _TemplateValues(dict):
    """Placeholder values; unknown keys render as-is instead of failing."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class FeedbackEngine:
    """Renders feedback for triggered rules and records the week's evaluation."""

    TEMPLATES: Dict[str, Dict[str, str]] = {
        WEEKLY_SPENDING_INCREASE: {
            "level": "warning",
            "title": "Spending is up this week",
            "message": (
                "You have spent {current_total:.2f} so far this week, "
                "{increase_percent}% more than the {previous_total:.2f} you spent last week."
            ),
        },
        CATEGORY_CONCENTRATION: {
            "level": "info",
            "title": "One category dominates your spending",
            "message": (
                "{category} accounts for {share_percent}% of this week's spending "
                "({category_total:.2f} of {total_expenses:.2f})."
            ),
        },
        SMALL_TRANSACTIONS: {
            "level": "warning",
            "title": "Small purchases are adding up",
            "message": (
                "You made {count} purchases under {threshold_amount:.2f} this week, "
                "totalling {total:.2f}."
            ),
        },
        WEEKLY_SPENDING_DECREASE: {
            "level": "positive",
            "title": "Nice work cutting back",
            "message": (
                "You have spent {current_total:.2f} this week, "
                "{decrease_percent}% less than last week's {previous_total:.2f}."
            ),
        },
    }

    FALLBACK_TEMPLATE: Dict[str, str] = {
        "level": "info",
        "title": "Spending pattern detected",
        "message": "Rule {rule_id} was triggered for this week.",
    }

    def __init__(
        self,
        feedback_store: FeedbackHistoryStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.feedback_store = feedback_store
        self.clock = clock

    def render(self, template_input: FeedbackTemplateInput, week_start: date) -> FeedbackCreate:
        """Fill a template's title and message from the rule data."""
        values = _TemplateValues(template_input.data)
        values.setdefault("rule_id", template_input.rule_id)
        return FeedbackCreate(
            user_id=template_input.user_id,
            rule_id=template_input.rule_id,
            level=template_input.level,
            title=template_input.template["title"].format_map(values),
            message=template_input.template["message"].format_map(values),
            data=template_input.data,
            week_start=week_start,
        )

    def process_rule_results(
        self,
        evaluation: EvaluationResult,
        evaluated_at: Optional[datetime] = None,
    ) -> List[FeedbackRecord]:
        """
        Store feedback for the evaluation's triggered rules.

        The week is stamped as evaluated even when no rule triggered, so it is
        served from history until its transactions change.

        Args:
            evaluation: Fresh evaluation from the rule engine
            evaluated_at: Time the evaluation started; defaults to now

        Returns:
            The week's stored feedback
        """
        week_start = evaluation.week_start
        records: List[FeedbackCreate] = []
        for rule in evaluation.triggered_rules:
            if not rule.triggered:
                continue
            template = self.TEMPLATES.get(rule.rule_id, self.FALLBACK_TEMPLATE)
            template_input = FeedbackTemplateInput(
                template={"title": template["title"], "message": template["message"]},
                data=rule.data,
                user_id=evaluation.user_id,
                rule_id=rule.rule_id,
                level=template["level"],
            )
            records.append(self.render(template_input, week_start))

        stored = self.feedback_store.store_evaluation(
            evaluation.user_id,
            week_start,
            records,
            evaluated_at or self.clock(),
        )
        logger.info(
            "Feedback stored",
            extra={"user_id": evaluation.user_id, "week_start": week_start, "count": len(stored)},
        )
        return stored
