"""CLI application entry point for mongo-rs-status.

This module is the **sole error boundary** for the process.  It catches
:class:`~mongo_rs_status.exceptions.RsStatusError`, ``KeyboardInterrupt``
and any unexpected ``Exception``, writes a diagnostic to stderr and
returns a well-defined exit code.  Stdout only ever receives a complete
encoded reply.

Two modes share the same executor and encoder:

* one-shot (default): connect, run ``replSetGetStatus`` or
  ``replSetInitiate``, disconnect, print the reply;
* ``--serve``: run the HTTP service on a single guarded connection.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from mongo_rs_status import config
from mongo_rs_status.cli import exit_codes
from mongo_rs_status.cli.console import console
from mongo_rs_status.cli.logging_setup import configure_logging
from mongo_rs_status.exceptions import RsStatusError
from mongo_rs_status.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="mongo-rs-status",
        description="Report MongoDB replica-set status, initiate a replica set, "
        "or serve the status over HTTP.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--uri",
        default=None,
        help=f"MongoDB URI (default: ${config.URI_ENV_VAR}, else {config.DEFAULT_URI}).",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=config.DEFAULT_TIMEOUT_SECONDS,
        help="Timeout in seconds for calls to MongoDB "
        f"({config.MIN_TIMEOUT_SECONDS}-{config.MAX_TIMEOUT_SECONDS}).",
    )
    parser.add_argument(
        "--admindb",
        default=config.DEFAULT_ADMIN_DB,
        help="Name of the admin database.",
    )
    parser.add_argument(
        "--initiate",
        default=None,
        metavar="PATH",
        help="Initiate the replica set with this config document ('-' for stdin).",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP status server instead of a one-shot query.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.DEFAULT_PORT,
        help=f"HTTP port to listen on ({config.MIN_PORT}-{config.MAX_PORT}).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr.",
    )
    return parser


# ---------------------------------------------------------------------------
# Collaborator factories (patched in tests)
# ---------------------------------------------------------------------------

def _build_driver() -> Any:
    from mongo_rs_status.infra.pymongo_driver import PyMongoDriver

    return PyMongoDriver()


def _build_codec() -> Any:
    from mongo_rs_status.infra.extjson_codec import ExtendedJsonCodec

    return ExtendedJsonCodec()


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_once(settings: config.Settings) -> int:
    """Run one status or initiate command on a dedicated connection.

    The document is read before connecting, and the connection is closed
    before anything is printed, so a failure at any step leaves stdout
    empty.
    """
    from mongo_rs_status.cli.documents import read_initiation_document
    from mongo_rs_status.core.encoder import ReplyEncoder
    from mongo_rs_status.core.executor import ReplicaSetService

    driver = _build_driver()
    codec = _build_codec()
    service = ReplicaSetService(
        driver,
        codec,
        admin_db=settings.admin_db,
        timeout=settings.timeout,
    )
    encoder = ReplyEncoder(codec)

    document: bytes | None = None
    if settings.initiate is not None:
        document = read_initiation_document(settings.initiate)

    handle = driver.connect(settings.uri, settings.timeout)
    try:
        if document is None:
            reply = service.query_status(handle)
        else:
            reply = service.initiate(handle, document)
        output = encoder.encode(reply)
    except BaseException:
        _disconnect_after_failure(driver, handle, settings.timeout)
        raise

    driver.disconnect(handle, settings.timeout)
    print(output.decode("utf-8"))
    return exit_codes.SUCCESS


def _disconnect_after_failure(driver: Any, handle: Any, timeout: float) -> None:
    try:
        driver.disconnect(handle, timeout)
    except RsStatusError as exc:
        logger.debug("Ignoring disconnect failure after error: %s", exc)


def _handle_serve(settings: config.Settings) -> int:
    """Serve replica-set status over HTTP until interrupted."""
    from mongo_rs_status.core.dispatcher import StatusDispatcher
    from mongo_rs_status.core.encoder import ReplyEncoder
    from mongo_rs_status.core.executor import ReplicaSetService
    from mongo_rs_status.core.guard import ConnectionGuard
    from mongo_rs_status.infra.http_server import run_server

    if settings.initiate is not None:
        logger.warning("--initiate is ignored in --serve mode")

    driver = _build_driver()
    codec = _build_codec()
    guard = ConnectionGuard(driver, settings.uri, settings.timeout)
    dispatcher = StatusDispatcher(
        guard,
        ReplicaSetService(
            driver,
            codec,
            admin_db=settings.admin_db,
            timeout=settings.timeout,
        ),
        ReplyEncoder(codec),
    )
    run_server(
        dispatcher,
        guard,
        port=settings.port,
        listener_timeout=settings.listener_timeout,
    )
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the mongo-rs-status CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, serve=args.serve)
    settings = config.load_settings(
        uri=args.uri,
        timeout=args.timeout,
        admin_db=args.admindb,
        initiate=args.initiate,
        serve=args.serve,
        port=args.port,
    )

    if settings.serve:
        return _handle_serve(settings)
    return _handle_once(settings)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point."""
    try:
        code = main()
        sys.exit(code)
    except RsStatusError as exc:
        console.report("Error", exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
