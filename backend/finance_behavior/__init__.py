"""Weekly spending rules and behavioral feedback for personal finance tracking."""

__version__ = "1.0.0"
