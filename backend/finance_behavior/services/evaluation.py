"""Decides whether a week's feedback can be reused or must be recomputed."""
import logging
from datetime import datetime
from typing import Callable

from finance_behavior.models.evaluation import (
    EvaluationPayload,
    EvaluationResponse,
    EvaluationResult,
    EvaluationWeeks,
    WeekRange,
)
from finance_behavior.models.feedback import RuleResult
from finance_behavior.models.queries import DateRangeQuery
from finance_behavior.services.feedback_engine import FeedbackEngine
from finance_behavior.services.rule_engine import RuleEngine
from finance_behavior.storage.base import FeedbackHistoryStore, TransactionStore
from finance_behavior.utils.dates import format_datetime, to_utc, utcnow, week_bounds

logger = logging.getLogger(__name__)


class RuleEvaluationDecision:
    """Serves weekly rule evaluations, from feedback history when still fresh."""

    def __init__(
        self,
        transaction_store: TransactionStore,
        feedback_store: FeedbackHistoryStore,
        rule_engine: RuleEngine,
        feedback_engine: FeedbackEngine,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.transaction_store = transaction_store
        self.feedback_store = feedback_store
        self.rule_engine = rule_engine
        self.feedback_engine = feedback_engine
        self.clock = clock

    def should_reevaluate(self, user_id: int, target_date: datetime) -> bool:
        """
        True when the week of ``target_date`` has no stored evaluation, or one
        of its transactions changed after that evaluation. Reads only.
        """
        week_start, week_end = week_bounds(target_date)

        evaluated_at = self.feedback_store.get_last_evaluated_at(user_id, week_start)
        if evaluated_at is None:
            return True

        last_update = self.transaction_store.get_last_update_timestamp(
            DateRangeQuery.of(user_id, week_start, week_end)
        )
        if last_update is None:
            return False
        return to_utc(last_update) > to_utc(evaluated_at)

    def evaluate(self, user_id: int, target_date: datetime) -> EvaluationResponse:
        """
        Evaluate the rules for the week containing ``target_date``.

        Cached results are rebuilt from stored feedback. Only rules that fired
        are stored, so a cached result lists triggered rules only, while a fresh
        one lists every rule.
        """
        if not self.should_reevaluate(user_id, target_date):
            return self._from_history(user_id, target_date)

        started_at = self.clock()
        logger.info(
            "Evaluating rules",
            extra={"user_id": user_id, "target_date": format_datetime(target_date)},
        )
        evaluation = self.rule_engine.evaluate_rules(user_id, target_date)
        feedback = self.feedback_engine.process_rule_results(evaluation, evaluated_at=started_at)

        return EvaluationResponse(
            success=True,
            data=EvaluationPayload(evaluation=evaluation, feedback=feedback),
        )

    def _from_history(self, user_id: int, target_date: datetime) -> EvaluationResponse:
        week_start, week_end = week_bounds(target_date)
        existing_feedback = self.feedback_store.get_by_user_and_date(user_id, week_start)
        logger.info(
            "Serving cached evaluation",
            extra={"user_id": user_id, "week_start": week_start, "feedback_count": len(existing_feedback)},
        )

        evaluation = EvaluationResult(
            user_id=user_id,
            evaluation_date=format_datetime(target_date),
            weeks=EvaluationWeeks(current=WeekRange(start=week_start, end=week_end)),
            triggered_rules=[
                RuleResult(rule_id=feedback.rule_id, triggered=True, data=feedback.data)
                for feedback in existing_feedback
            ],
            cached=True,
        )
        return EvaluationResponse(
            success=True,
            data=EvaluationPayload(evaluation=evaluation, feedback=existing_feedback),
        )
