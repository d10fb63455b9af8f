"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class WePayConfig(BaseSettings):
    """WePay group ledger configuration"""

    # Storage configuration
    storage_backend: str = "sqlite"  # sqlite or memory
    sqlite_path: str = "wepay.db"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    api_reload: bool = False
    cors_origins: List[str] = ["*"]

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Business rules configuration
    duplicate_window_timezone: str = ""  # IANA name; empty = server local time

    class Config:
        env_prefix = "WEPAY_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = WePayConfig()


def get_config() -> WePayConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> WePayConfig:
    """Reload configuration from environment"""
    global config
    config = WePayConfig()
    return config
