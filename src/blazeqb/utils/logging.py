"""Structured logging helpers for BlazeQB."""

from __future__ import annotations

import logging
import os
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, Optional, Sequence, Union

from ..security.redaction import redact_params

if TYPE_CHECKING:
    from ..query.statement import Statement

SLOW_QUERY_ENV = "BLAZEQB_SLOW_QUERY_MS"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


@dataclass(frozen=True)
class QueryLoggerMeta:
    duration_ms: float


QueryLogger = Callable[[dict, QueryLoggerMeta], Any]


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def configure_logging(level: int = logging.INFO) -> None:
    logger = logging.getLogger("blazeqb")
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(correlation_id)s | %(name)s | %(message)s"
    )
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())
    logger.addHandler(handler)
    logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(f"blazeqb.{name}")


def set_correlation_id(value: Optional[str] = None) -> str:
    token = value or str(uuid.uuid4())
    _correlation_id.set(token)
    return token


def get_correlation_id() -> str:
    cid = _correlation_id.get()
    if cid is None:
        cid = set_correlation_id()
    return cid


def resolve_slow_query_ms(*, default: int, override: int | None = None) -> int:
    """
    Pick the slow query threshold: explicit override, then environment, then default.
    """

    if override is not None:
        return int(override)
    raw = os.getenv(SLOW_QUERY_ENV)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger("blazeqb.config").warning(
            "Ignoring invalid %s value %r", SLOW_QUERY_ENV, raw
        )
        return default


@contextmanager
def time_call(
    name: str,
    logger: logging.Logger,
    *,
    sql: str | None = None,
    params: Iterable[Any] | None = None,
    threshold_ms: int = 100,
) -> Iterator[None]:
    """
    Log how long the block took; at WARNING once ``threshold_ms`` is reached.

    The record is emitted even when the block raises.
    """

    start = time.monotonic()
    try:
        yield
    finally:
        elapsed_ms = (time.monotonic() - start) * 1000
        level = logging.WARNING if elapsed_ms >= threshold_ms else logging.DEBUG
        logger.log(
            level,
            "%s took %.2fms",
            name,
            elapsed_ms,
            extra={"sql": sql, "params": params, "elapsed_ms": elapsed_ms},
        )


def default_query_logger(query: dict, meta: QueryLoggerMeta) -> None:
    get_logger("query").info(
        "[%.2fms] %s",
        meta.duration_ms,
        query["query"],
        extra={"sql": query["query"], "params": query["arguments"], "fetch_type": query["fetchType"]},
    )


@contextmanager
def logged_execution(
    statements: Union["Statement", Sequence["Statement"]],
    hook: Optional[QueryLogger],
) -> Iterator[None]:
    """
    Invoke ``hook`` once per statement after the wrapped block finishes,
    whether it succeeded or raised.
    """

    start = time.monotonic()
    try:
        yield
    finally:
        if hook is not None:
            meta = QueryLoggerMeta(duration_ms=(time.monotonic() - start) * 1000)
            batch = statements if isinstance(statements, (list, tuple)) else [statements]
            for statement in batch:
                payload = statement.to_dict()
                payload["arguments"] = redact_params(payload["arguments"])
                hook(payload, meta)
