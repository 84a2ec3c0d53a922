"""Structured logging helpers for TripleORM."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional

ROOT_LOGGER = "tripleorm"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(correlation_id)s | %(name)s | %(message)s"

_correlation_id: ContextVar[str | None] = ContextVar("tripleorm_correlation_id", default=None)


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def configure_logging(level: int = logging.INFO) -> None:
    logger = logging.getLogger(ROOT_LOGGER)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    logger.addHandler(handler)
    logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def set_correlation_id(value: Optional[str] = None) -> str:
    token = value or uuid.uuid4().hex
    _correlation_id.set(token)
    return token


def get_correlation_id() -> str:
    cid = _correlation_id.get()
    if cid is None:
        cid = set_correlation_id()
    return cid


@contextmanager
def time_call(
    name: str,
    logger: logging.Logger,
    *,
    threshold_ms: float = 100,
    **details: Any,
) -> Iterator[None]:
    """
    Log how long the wrapped block took; slow blocks are logged as warnings.
    """
    start = time.monotonic()
    try:
        yield
    finally:
        elapsed_ms = (time.monotonic() - start) * 1000
        level = logging.WARNING if elapsed_ms >= threshold_ms else logging.DEBUG
        logger.log(level, "%s took %.2fms", name, elapsed_ms, extra={"elapsed_ms": elapsed_ms, **details})
