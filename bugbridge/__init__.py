"""Bridge between chat threads and GitHub issues.

A trigger reaction on a chat message opens a GitHub issue and a companion
thread; replies in the thread become issue comments and issue comments are
mirrored back into the thread.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
