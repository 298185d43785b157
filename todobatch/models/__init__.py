# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request and response models."""

from todobatch.models.todo import (
    BatchCreateRequest,
    BatchCreateResponse,
    BatchResultItem,
    CreateTodoRequest,
    TodoResponse,
    UpdateTodoRequest,
)

__all__ = [
    "CreateTodoRequest",
    "UpdateTodoRequest",
    "BatchCreateRequest",
    "BatchCreateResponse",
    "BatchResultItem",
    "TodoResponse",
]
