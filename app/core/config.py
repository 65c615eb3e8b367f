from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "FinancialPlanningEngine"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # Identifiers coming from the persistence layer
    IDENTIFIER_PATTERN: str = Field(default=r"^[A-Za-z0-9_-]{1,64}$")

    # Budgets
    BUDGET_ALERT_THRESHOLD: Decimal = Field(default=Decimal("80"))

    # Debt payoff simulation (50 years)
    DEBT_PAYOFF_MAX_MONTHS: int = Field(default=600)

    # Retirement age band
    MIN_WORKING_AGE: int = Field(default=18)
    MIN_RETIREMENT_AGE: int = Field(default=50)
    MAX_AGE: int = Field(default=100)

    # Scenarios
    SCENARIO_MIN_HORIZON: int = Field(default=1)
    SCENARIO_MAX_HORIZON: int = Field(default=50)
    SCENARIO_GOAL_AMOUNT: Decimal = Field(default=Decimal("100000"))

    # Spending analysis / recommendations
    TOP_SPENDING_DAYS: int = Field(default=10)
    RECOMMENDATION_LOOKBACK_DAYS: int = Field(default=30)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


settings = Settings()
