from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"
    log_file: Optional[str] = None

    # Backend tables (CSV directory)
    data_dir: str = "sample_data"

    # Local draft persistence
    drafts_dir: str = ".drafts"
    draft_namespace: str = "lavash-draft-orders"

    # Ledger settings
    default_unit_price: float = 10.0
    default_payment_method: str = "cash"
    currency_symbol: str = "₺"

    # Seed data settings
    default_seed_customers: int = 25
    default_seed_days: int = 14
    default_seed_value: int = 42

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
