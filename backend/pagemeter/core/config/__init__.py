"""Configuration module for the PageMeter backend.

Usage:
    from pagemeter.core.config import settings, Environment

    if settings.ENVIRONMENT == Environment.PRD:
        ...
"""

from pagemeter.core.config.enums import Environment, LogLevel
from pagemeter.core.config.settings import Settings

__all__ = [
    "Settings",
    "Environment",
    "LogLevel",
    "settings",
]

# Singleton settings instance
settings = Settings()
