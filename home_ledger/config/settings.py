"""
Configuration Management for Home Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The ledger constants (decoy factor, settlement tolerance, alert defaults)
live next to the storage configuration so startup checks see everything.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Ledger engine constants and first-run defaults."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    decoy_factor: Decimal = Field(
        default=Decimal("0.20"),
        gt=0,
        le=1,
        description="Scale applied to every displayed amount in decoy mode"
    )
    settlement_epsilon: Decimal = Field(
        default=Decimal("0.001"),
        ge=0,
        description="Remaining balance at or below which a debt counts as settled"
    )

    # Savings alert defaults (used until the user saves their own)
    default_savings_threshold: int = Field(
        default=100000,
        ge=0,
        description="Cash balance (YER) above which the savings alert fires"
    )
    default_savings_percentage: int = Field(
        default=15,
        ge=1,
        le=100,
        description="Share of cash balance suggested for a savings transfer"
    )

    # Exchange rates (YER per unit) used until the user enters their own
    default_usd_rate: Decimal = Field(
        default=Decimal("550"),
        gt=0,
        description="Default YER per USD"
    )
    default_sar_rate: Decimal = Field(
        default=Decimal("140"),
        gt=0,
        description="Default YER per SAR"
    )


class StorageSettings(BaseSettings):
    """Which key-value backend holds the persisted state."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Storage backend: 'memory' or 'google_sheets'"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    state_sheet_name: str = Field(
        default="LedgerState",
        description="Name of the sheet holding the key-value state"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()


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

    Returns a dict of {setting_name: is_valid}, with an
    "<name>_error" entry for each section that failed to load.
    """
    results = {}

    settings = get_settings()

    sections = {
        "ledger": lambda: settings.ledger,
        "storage": lambda: settings.storage,
    }
    try:
        backend = settings.storage.backend
    except Exception:
        backend = "memory"
    if backend == "google_sheets":
        sections["google_sheets"] = lambda: settings.google_sheets

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
