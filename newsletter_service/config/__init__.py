from newsletter_service.config.loader import get_settings, load_settings
from newsletter_service.config.models import (
    ApplicationSettings,
    DatabaseSettings,
    EmailClientSettings,
    HashingSettings,
    Settings,
)

__all__ = [
    "get_settings",
    "load_settings",
    "Settings",
    "ApplicationSettings",
    "DatabaseSettings",
    "EmailClientSettings",
    "HashingSettings",
]
