"""Allow ``python -m mongo_rs_status`` invocation.

Delegates to the CLI error-boundary entry point so that the module form
behaves identically to the ``mongo-rs-status`` console script.
"""

from __future__ import annotations

from mongo_rs_status.cli.app import cli

if __name__ == "__main__":
    cli()
