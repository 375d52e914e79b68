"""
Unit tests for the store retry policy.
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from socialgraph.core.exceptions import InvalidArgument, Unavailable
from socialgraph.core.retry import RetryConfig, calculate_delay, is_transient_error, with_retry


def operational_error():
    return OperationalError("UPDATE graph_edges", {}, Exception("database is locked"))


class TestTransientClassification:

    def test_operational_error_is_transient(self):
        assert is_transient_error(operational_error())

    def test_builtin_timeouts_are_transient(self):
        assert is_transient_error(TimeoutError())
        assert is_transient_error(ConnectionResetError())

    def test_integrity_error_is_not_transient(self):
        assert not is_transient_error(IntegrityError("INSERT", {}, Exception("UNIQUE")))

    def test_application_errors_are_not_transient(self):
        assert not is_transient_error(InvalidArgument("bad id"))
        assert not is_transient_error(KeyError("x"))


class TestDelay:

    def test_exponential_growth(self):
        config = RetryConfig(base_delay=0.1, exponential_base=2.0, max_delay=10.0, jitter=0.0)
        assert calculate_delay(1, config) == pytest.approx(0.1)
        assert calculate_delay(2, config) == pytest.approx(0.2)
        assert calculate_delay(3, config) == pytest.approx(0.4)

    def test_capped_at_max_delay(self):
        config = RetryConfig(base_delay=1.0, max_delay=2.0, jitter=0.0)
        assert calculate_delay(10, config) == pytest.approx(2.0)

    def test_jitter_within_range(self):
        config = RetryConfig(base_delay=1.0, max_delay=1.0, jitter=0.1)
        for _ in range(20):
            assert 0.9 <= calculate_delay(1, config) <= 1.1


class TestWithRetry:

    def test_success_first_try(self):
        sleeps = []
        assert with_retry(lambda: 42, sleep=sleeps.append) == 42
        assert sleeps == []

    def test_recovers_after_transient_failures(self):
        calls = {"n": 0}
        sleeps = []

        def flaky():
            calls["n"] += 1
            if calls["n"] < 3:
                raise operational_error()
            return "ok"

        result = with_retry(flaky, RetryConfig(max_attempts=3, jitter=0.0), sleep=sleeps.append)

        assert result == "ok"
        assert calls["n"] == 3
        assert len(sleeps) == 2

    def test_exhausted_retries_raise_unavailable(self):
        def always_down():
            raise operational_error()

        with pytest.raises(Unavailable) as exc_info:
            with_retry(always_down, RetryConfig(max_attempts=2), sleep=lambda _: None)

        assert exc_info.value.attempts == 2
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_non_transient_error_not_retried(self):
        calls = {"n": 0}

        def invalid():
            calls["n"] += 1
            raise InvalidArgument("bad")

        with pytest.raises(InvalidArgument):
            with_retry(invalid, RetryConfig(max_attempts=5), sleep=lambda _: None)
        assert calls["n"] == 1
