from .dates import parse_target_date, previous_week_bounds, week_bounds
from .logging import configure_logging

__all__ = ["parse_target_date", "previous_week_bounds", "week_bounds", "configure_logging"]
