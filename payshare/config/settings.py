"""
Configuration Management for PayShare

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The default split (30/70/5/10) and the default conversion rate are
configuration, handed to callers as immutable policy values rather
than read from module-level globals.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from payshare.models.job import AdvancedPolicy


class PolicyDefaultsSettings(BaseSettings):
    """Defaults for the advanced policy form and the currency rate."""

    model_config = SettingsConfigDict(
        env_prefix="PAYSHARE_POLICY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    company_percentage: float = Field(
        default=30.0,
        ge=0,
        le=100,
        description="Company share as percent of the payment"
    )
    developer_percentage: float = Field(
        default=70.0,
        ge=0,
        le=100,
        description="Developer base as percent of the payment"
    )
    job_hunter_percentage: float = Field(
        default=5.0,
        ge=0,
        le=100,
        description="Job hunter share as percent of the developer base"
    )
    communicator_percentage: float = Field(
        default=10.0,
        ge=0,
        le=100,
        description="Communicator share as percent of the developer base"
    )
    conversion_rate: float = Field(
        default=278.0,
        gt=0,
        description="Local currency units per reference unit"
    )

    def default_policy(self) -> AdvancedPolicy:
        """The configured defaults as an immutable policy."""
        return AdvancedPolicy(
            company_percentage=self.company_percentage,
            developer_percentage=self.developer_percentage,
            job_hunter_percentage=self.job_hunter_percentage,
            communicator_percentage=self.communicator_percentage,
        )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Validation thresholds
    max_payment_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Payments above this are flagged for review"
    )
    max_project_name_length: int = Field(
        default=100,
        ge=1,
        description="Longest accepted project name"
    )
    reconciliation_tolerance: float = Field(
        default=1e-9,
        ge=0,
        description="Tolerance when checking shares sum to the payment, scaled by payments above 1"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def policy(self) -> PolicyDefaultsSettings:
        return PolicyDefaultsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error for anything that failed.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.policy
        results["policy"] = True
    except Exception as e:
        results["policy"] = False
        results["policy_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
