# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions for the todo domain."""


class TodoServiceError(Exception):
    """Base exception for todo service errors."""

    pass


class TodoNotFoundError(TodoServiceError):
    """Raised when a todo does not exist or has been deleted."""

    pass


class TodoValidationError(TodoServiceError):
    """Raised when todo data fails domain validation."""

    pass


class UnsupportedCapabilityError(TodoServiceError):
    """Raised when a storage backend lacks an optional capability."""

    pass


class NotificationQueueFullError(TodoServiceError):
    """Raised when the notifier cannot accept another notification."""

    pass


class NotificationTimeoutError(TodoServiceError):
    """Raised when a notification could not be queued in time."""

    pass
