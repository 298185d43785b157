# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    todos: Batch todo creation endpoints.
"""

from fastapi import APIRouter

from todobatch.api.v1 import todos

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(todos.router, prefix="/todos", tags=["Todos"])

__all__ = ["router"]
