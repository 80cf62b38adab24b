"""Logging setup: plain terminal lines with ``extra=`` fields appended as JSON."""
import json
import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Attributes every LogRecord carries, plus the ones Formatter.format() adds.
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class ExtraFormatter(logging.Formatter):
    """Formatter that appends fields passed via ``extra=`` as sorted JSON."""

    def extra_fields(self, record: logging.LogRecord) -> dict:
        return {key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS}

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = self.extra_fields(record)
        if fields:
            line = f"{line} | {json.dumps(fields, default=str, sort_keys=True)}"
        return line


def configure_logging(level: str = "INFO") -> None:
    """Install the formatter on the root logger once; later calls only adjust the level."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if root.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(ExtraFormatter(LOG_FORMAT))
    root.addHandler(handler)
