"""CLI console helpers with optional Rich support.

Diagnostics go to stderr; stdout is reserved for the encoded reply.
Rich is imported lazily so ``--help`` and ``--version`` keep working
when it is not installed.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from mongo_rs_status.exceptions import EnvironmentError, RsStatusError

_MARKUP_TAG = re.compile(r"\[/?[a-z][a-z ]*\]")


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console() -> Any:
    """Create a Rich console instance targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True)


class _ConsoleProxy:
    """Stderr writer that renders with Rich when it is available."""

    def print(self, *objects: object) -> None:
        """Render Rich markup, or strip to a plain stderr print."""
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            print(*(_MARKUP_TAG.sub("", str(obj)) for obj in objects), file=sys.stderr)
            return
        rich_console.print(*objects)

    def report(self, label: str, exc: RsStatusError) -> None:
        """Render *exc* and its hint without interpreting markup in the message."""
        try:
            from rich.markup import escape
        except ModuleNotFoundError:
            print(f"{label}: {exc}", file=sys.stderr)
            if exc.hint:
                print(f"Hint: {exc.hint}", file=sys.stderr)
            return
        self.print(f"[bold red]{label}:[/bold red] {escape(str(exc))}")
        if exc.hint:
            self.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")


console = _ConsoleProxy()
