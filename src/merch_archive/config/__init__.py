"""Configuration module for Merch Archive."""

from .settings import (
    APISettings,
    AuthSettings,
    CatalogSettings,
    DatabaseSettings,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "APISettings",
    "AuthSettings",
    "CatalogSettings",
    "DatabaseSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
