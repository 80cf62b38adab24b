"""FastAPI main application."""
import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from finance_behavior.config import Settings
from finance_behavior.errors import FinanceError
from finance_behavior.models.evaluation import (
    ErrorResponse,
    EvaluationResponse,
    EvaluationWeeks,
    FeedbackHistoryResponse,
    OverallSummaryResponse,
    WeekRange,
    WeeklySummaryPayload,
    WeeklySummaryResponse,
)
from finance_behavior.models.queries import DateRangeQuery
from finance_behavior.services.aggregation import TransactionAggregator
from finance_behavior.services.evaluation import RuleEvaluationDecision
from finance_behavior.services.feedback_engine import FeedbackEngine
from finance_behavior.services.rule_engine import RuleEngine
from finance_behavior.storage import FeedbackHistoryStore, TransactionStore, build_stores
from finance_behavior.utils.dates import parse_target_date, week_bounds
from finance_behavior.utils.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    transaction_store: Optional[TransactionStore] = None,
    feedback_store: Optional[FeedbackHistoryStore] = None,
) -> FastAPI:
    """
    Build the application and wire its services.

    Run with ``uvicorn finance_behavior.main:create_app --factory``.

    Args:
        settings: Settings to use; read from the environment when omitted
        transaction_store: Store override, mainly for tests
        feedback_store: Store override, mainly for tests
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)

    if transaction_store is None or feedback_store is None:
        default_transactions, default_feedback = build_stores(settings)
        transaction_store = transaction_store or default_transactions
        feedback_store = feedback_store or default_feedback

    aggregator = TransactionAggregator(transaction_store, settings.small_transaction_threshold)
    rule_engine = RuleEngine(aggregator, settings)
    feedback_engine = FeedbackEngine(feedback_store)
    decision = RuleEvaluationDecision(transaction_store, feedback_store, rule_engine, feedback_engine)

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.settings = settings
    app.state.transaction_store = transaction_store
    app.state.feedback_store = feedback_store
    app.state.decision = decision

    @app.exception_handler(FinanceError)
    async def finance_error_handler(request: Request, exc: FinanceError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "Request failed",
            extra={"path": request.url.path, "code": exc.code, "error": exc.message},
        )
        body = ErrorResponse(error={"code": exc.code, "message": exc.message})
        return JSONResponse(status_code=exc.status_code, content=body.model_dump())

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": settings.app_name, "version": "1.0.0"}

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": settings.app_name,
        }

    @app.get("/rules/evaluate", response_model=EvaluationResponse)
    def evaluate_rules(
        user_id: int = Query(..., ge=1, description="User identifier"),
        target: Optional[str] = Query(None, alias="date", description="ISO date inside the week; defaults to today"),
    ):
        """
        Evaluate the weekly spending rules for a user.

        Served from feedback history unless the week's transactions changed
        since its last evaluation.
        """
        target_date = parse_target_date(target)
        return decision.evaluate(user_id, target_date)

    @app.get("/transactions/weekly-summary", response_model=WeeklySummaryResponse)
    def weekly_summary(
        user_id: int = Query(..., ge=1, description="User identifier"),
        target: Optional[str] = Query(None, alias="date", description="ISO date inside the week; defaults to today"),
    ):
        """Expense aggregates for the week containing the given date."""
        target_date = parse_target_date(target)
        start, end = week_bounds(target_date)
        summary = aggregator.get_weekly_summary(DateRangeQuery.of(user_id, start, end))
        return WeeklySummaryResponse(
            data=WeeklySummaryPayload(
                weeks=EvaluationWeeks(current=WeekRange(start=start, end=end)),
                summary=summary,
            )
        )

    @app.get("/transactions/summary", response_model=OverallSummaryResponse)
    def overall_summary(user_id: int = Query(..., ge=1, description="User identifier")):
        """Lifetime totals and month-over-month trends."""
        return OverallSummaryResponse(data=aggregator.get_overall_summary(user_id, date.today()))

    @app.get("/feedback/history", response_model=FeedbackHistoryResponse)
    def feedback_history(
        user_id: int = Query(..., ge=1, description="User identifier"),
        limit: int = Query(settings.feedback_history_limit, ge=1, le=500),
    ):
        """Most recent feedback across weeks."""
        return FeedbackHistoryResponse(data=feedback_store.get_recent(user_id, limit))

    return app


if __name__ == "__main__":
    import os

    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()
    uvicorn.run(create_app(), host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
