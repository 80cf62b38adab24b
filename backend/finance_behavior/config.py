"""Configuration settings for the application."""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Built once by the application factory and handed to each component's
    constructor. Nothing below the HTTP layer reads the environment.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "Finance Behavioral System API"
    debug: bool = False
    log_level: str = "INFO"

    storage_backend: str = Field(default="sqlite", description="'sqlite' or 'memory'")
    database_path: str = "finance_behavior.db"

    # Rule thresholds
    small_transaction_threshold: float = Field(default=10.0, gt=0)
    small_transaction_min_count: int = Field(default=5, ge=1)
    spending_increase_ratio: float = Field(default=0.20, ge=0)
    spending_decrease_ratio: float = Field(default=0.20, ge=0, le=1)
    category_concentration_ratio: float = Field(default=0.50, gt=0, le=1)

    feedback_history_limit: int = Field(default=50, ge=1)
