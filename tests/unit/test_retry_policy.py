"""
Unit tests for RetryPolicy.

Run: pytest tests/unit/test_retry_policy.py -v
"""

import pytest
from unittest.mock import MagicMock

from services.retry_policy import RetryPolicy
from exceptions import CatalogNotFoundError, CatalogRemoteError


class TestRetryPolicy:
    """Tests for RetryPolicy.call() and delay_for()"""

    def test_default_is_single_attempt(self):
        """Should not retry by default."""
        fn = MagicMock(side_effect=CatalogRemoteError("Brand", 1, status=503))
        sleeps = []

        with pytest.raises(CatalogRemoteError):
            RetryPolicy().call(fn, 1, sleep=sleeps.append)

        assert fn.call_count == 1
        assert sleeps == []

    def test_returns_value_on_success(self):
        fn = MagicMock(return_value={"Id": 1})

        assert RetryPolicy(max_attempts=3).call(fn, "REF") == {"Id": 1}
        fn.assert_called_once_with("REF")

    def test_retries_remote_errors_with_backoff(self):
        """Should sleep backoff * multiplier^(n-1) between attempts."""
        fn = MagicMock(side_effect=[
            CatalogRemoteError("Skus", 10, status=500),
            CatalogRemoteError("Skus", 10, status=502),
            ["ok"],
        ])
        sleeps = []
        policy = RetryPolicy(max_attempts=3, backoff_seconds=0.5, backoff_multiplier=2.0)

        assert policy.call(fn, 10, sleep=sleeps.append) == ["ok"]
        assert fn.call_count == 3
        assert sleeps == [0.5, 1.0]

    def test_gives_up_after_max_attempts(self):
        fn = MagicMock(side_effect=CatalogRemoteError("Stock", 5, status=500))
        sleeps = []

        with pytest.raises(CatalogRemoteError):
            RetryPolicy(max_attempts=2, backoff_seconds=0).call(fn, 5, sleep=sleeps.append)

        assert fn.call_count == 2
        assert sleeps == [0]

    def test_not_found_is_never_retried(self):
        """A 404 is an answer, not a transient failure."""
        fn = MagicMock(side_effect=CatalogNotFoundError("Product", "REF"))

        with pytest.raises(CatalogNotFoundError):
            RetryPolicy(max_attempts=5).call(fn, "REF", sleep=lambda s: None)

        assert fn.call_count == 1

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_delay_for(self):
        policy = RetryPolicy(backoff_seconds=1.0, backoff_multiplier=3.0)

        assert policy.delay_for(1) == 1.0
        assert policy.delay_for(3) == 9.0

    def test_from_settings_defaults(self):
        """Default configuration keeps the try-once behavior."""
        assert RetryPolicy.from_settings().max_attempts == 1
