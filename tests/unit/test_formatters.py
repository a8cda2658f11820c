"""Unit tests for kraken_check.formatters."""

from io import StringIO

from rich.console import Console

from kraken_check.formatters import describe_outcome, print_run_summary
from kraken_check.runner import Outcome, RunSummary


class TestDescribeOutcome:
    def test_time(self):
        outcome = Outcome("t", True, details={"unixtime": 1, "rfc1123": "Sun, 21 Mar 21"})
        assert describe_outcome(outcome) == "server time Sun, 21 Mar 21"

    def test_time_without_rfc1123(self):
        outcome = Outcome("t", True, details={"unixtime": 1700000000, "rfc1123": None})
        assert describe_outcome(outcome) == "server time 1700000000"

    def test_ticker(self):
        outcome = Outcome("t", True, details={"pair": "XXBTZUSD", "last": 52641.1})
        assert describe_outcome(outcome) == "XXBTZUSD last price 52641.1"

    def test_orders(self):
        outcome = Outcome("o", True, details={"count": 2, "order_ids": ["A", "B"]})
        assert describe_outcome(outcome) == "2 open orders: A, B"

    def test_no_orders(self):
        outcome = Outcome("o", True, details={"count": 0, "order_ids": []})
        assert describe_outcome(outcome) == "0 open orders"

    def test_failure(self):
        outcome = Outcome("o", False, error_kind="StatusError", message="Expected status 200, got 500")
        assert describe_outcome(outcome) == "StatusError: Expected status 200, got 500"


def test_print_run_summary():
    buf = StringIO()
    summary = RunSummary(
        [
            Outcome("public-time", True, details={"unixtime": 1, "rfc1123": None}),
            Outcome("private-open-orders", False, error_kind="ShapeError", message="['EAPI:Invalid key']"),
        ]
    )

    print_run_summary(summary, console=Console(file=buf, width=120))

    text = buf.getvalue()
    assert "public-time" in text
    assert "PASS" in text
    assert "FAIL" in text
    assert "['EAPI:Invalid key']" in text
    assert "Ran 2 scenarios: 1 passed, 1 failed" in text
