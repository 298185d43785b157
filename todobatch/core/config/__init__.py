# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for todobatch.

Example:
    >>> from todobatch.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from todobatch.core.config.settings import (
    APISettings,
    BatchSettings,
    NotifierSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "BatchSettings",
    "StorageSettings",
    "NotifierSettings",
    "APISettings",
]
