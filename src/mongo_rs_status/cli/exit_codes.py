"""Process exit codes returned by the CLI.

Every exit path uses one of these constants.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The reply was printed, or the server shut down cleanly."""

GENERAL_ERROR: int = 1
"""A known RsStatusError was caught and reported on stderr."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C during a one-shot run (128 + SIGINT=2)."""
