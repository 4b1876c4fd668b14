from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from cvsync.config import configure_logging, resolve_log_level
from cvsync.config.logging import LOG_LEVEL_ENV

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.mark.parametrize(
    ("env_value", "verbose", "expected"),
    [
        (None, False, logging.INFO),
        (None, True, logging.DEBUG),
        ("warning", False, logging.WARNING),
        ("warning", True, logging.DEBUG),
        ("chatty", False, logging.INFO),
    ],
)
def test_resolve_log_level(
    monkeypatch: pytest.MonkeyPatch,
    env_value: str | None,
    *,
    verbose: bool,
    expected: int,
) -> None:
    if env_value is None:
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    else:
        monkeypatch.setenv(LOG_LEVEL_ENV, env_value)

    assert resolve_log_level(verbose=verbose) == expected


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    httpx_level = logging.getLogger("httpx").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


@pytest.mark.usefixtures("restore_root_logger")
def test_configure_logging_quiets_http_loggers() -> None:
    configure_logging(level=logging.DEBUG, force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
