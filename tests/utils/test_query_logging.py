import logging

import pytest

from blazeqb.query import FetchType, Statement
from blazeqb.utils.logging import (
    QueryLoggerMeta,
    default_query_logger,
    get_correlation_id,
    get_logger,
    logged_execution,
    resolve_slow_query_ms,
    set_correlation_id,
    time_call,
)


def test_correlation_id_round_trip():
    token = set_correlation_id("test-token")
    assert token == "test-token"
    assert get_correlation_id() == "test-token"


def test_time_call_warns_on_slow_queries(caplog):
    logger = get_logger("tests.timing")
    caplog.set_level(logging.DEBUG, logger=logger.name)
    with time_call("unit-test", logger, sql="SELECT 1", threshold_ms=0):
        pass
    records = [record for record in caplog.records if record.name == logger.name]
    assert records[0].levelno == logging.WARNING
    assert "unit-test took" in records[0].getMessage()
    assert records[0].sql == "SELECT 1"


def test_logged_execution_calls_hook_once_per_statement():
    calls = []
    statements = [Statement("SELECT ?1", ("a",), FetchType.ONE), Statement("SELECT 2")]
    with logged_execution(statements, lambda query, meta: calls.append((query, meta))):
        pass
    assert [query["query"] for query, _ in calls] == ["SELECT ?1", "SELECT 2"]
    assert isinstance(calls[0][1], QueryLoggerMeta)


def test_logged_execution_reports_failures():
    calls = []
    with pytest.raises(RuntimeError):
        with logged_execution(Statement("SELECT 1"), lambda query, meta: calls.append(query)):
            raise RuntimeError("driver down")
    assert calls == [{"query": "SELECT 1", "arguments": [], "fetchType": "NONE"}]


def test_default_query_logger(caplog):
    caplog.set_level(logging.INFO, logger="blazeqb.query")
    default_query_logger(Statement("SELECT 1").to_dict(), QueryLoggerMeta(duration_ms=1.5))
    assert caplog.records[-1].getMessage() == "[1.50ms] SELECT 1"


@pytest.mark.parametrize(
    ("env", "override", "expected"),
    [(None, None, 100), ("40", None, 40), ("40", 7, 7), ("fast", None, 100)],
)
def test_resolve_slow_query_ms(monkeypatch, env, override, expected):
    if env is None:
        monkeypatch.delenv("BLAZEQB_SLOW_QUERY_MS", raising=False)
    else:
        monkeypatch.setenv("BLAZEQB_SLOW_QUERY_MS", env)
    assert resolve_slow_query_ms(default=100, override=override) == expected
