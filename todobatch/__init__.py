"""todobatch backend.

Todo service with a bounded concurrent batch executor for creating many
records at once.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
