"""Shared pytest fixtures and configuration for the mongo-rs-status test suite.

Guidelines
----------
* No MongoDB server and no outbound network in any test.
* The driver is faked at the :class:`MongoDriver` protocol boundary;
  pymongo itself is mocked only in the infra tests.
* HTTP tests bind to an ephemeral port on 127.0.0.1.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

import pytest

from mongo_rs_status.cli.logging_setup import PACKAGE_LOGGER
from mongo_rs_status.infra.extjson_codec import ExtendedJsonCodec
from tests.fakes import FakeDriver


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Undo ``configure_logging`` so no handler outlives its captured stream."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def codec() -> ExtendedJsonCodec:
    return ExtendedJsonCodec()


@pytest.fixture
def sync_closer() -> Callable[[Callable[[], None]], None]:
    """Closer that runs teardown inline so tests can observe it immediately."""

    def _run(task: Callable[[], None]) -> None:
        task()

    return _run
