# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Todo domain entity.

A Todo is a plain dataclass without storage dependencies. Deletion is a
lifecycle state rather than a missing row: deleted todos keep their data
with state DELETED and a deleted_at timestamp.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum

from todobatch.utils.datetime import utc_now


class Priority(IntEnum):
    """Todo priority levels."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3


class TodoState(str, Enum):
    """Lifecycle state of a todo."""

    ACTIVE = "active"
    DELETED = "deleted"


@dataclass
class Todo:
    """A task tracked by the service.

    Attributes:
        title: Short task title, must not be blank.
        description: Optional free-form details.
        priority: Priority level.
        completed: Whether the task is done.
        id: Identifier assigned by the repository on create.
        state: Lifecycle state.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
        deleted_at: Deletion timestamp, set only when state is DELETED.
    """

    title: str
    description: str = ""
    priority: Priority = Priority.MEDIUM
    completed: bool = False
    id: str = ""
    state: TodoState = TodoState.ACTIVE
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    deleted_at: datetime | None = None

    def is_valid(self) -> bool:
        """Check that required fields hold acceptable values."""
        if not self.title or not self.title.strip():
            return False
        try:
            Priority(self.priority)
        except ValueError:
            return False
        return True

    @property
    def is_deleted(self) -> bool:
        """Whether the todo has been soft deleted."""
        return self.state is TodoState.DELETED

    def mark_complete(self) -> None:
        """Mark the todo as completed."""
        self.completed = True
        self.updated_at = utc_now()

    def mark_incomplete(self) -> None:
        """Mark the todo as not completed."""
        self.completed = False
        self.updated_at = utc_now()

    def mark_deleted(self) -> None:
        """Move the todo to the DELETED state."""
        deleted_at = utc_now()
        self.state = TodoState.DELETED
        self.deleted_at = deleted_at
        self.updated_at = deleted_at
