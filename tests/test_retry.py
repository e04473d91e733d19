from unittest.mock import MagicMock

import pytest

from retry import RetryPolicy, call_with_retry


def test_no_retry_calls_once_and_raises() -> None:
    fn = MagicMock(side_effect=RuntimeError("boom"))
    sleep = MagicMock()

    with pytest.raises(RuntimeError, match="boom"):
        call_with_retry(fn, RetryPolicy(retries=0), sleep=sleep)

    assert fn.call_count == 1
    sleep.assert_not_called()


def test_three_retries_means_four_attempts_with_backoff() -> None:
    fn = MagicMock(side_effect=RuntimeError("down"))
    sleep = MagicMock()

    with pytest.raises(RuntimeError, match="down"):
        call_with_retry(fn, RetryPolicy(retries=3), sleep=sleep)

    assert fn.call_count == 4
    assert [call.args[0] for call in sleep.call_args_list] == [1.0, 2.0, 4.0]


def test_success_after_failure_returns_value() -> None:
    fn = MagicMock(side_effect=[RuntimeError("flaky"), "ok"])

    assert call_with_retry(fn, RetryPolicy(retries=3), sleep=MagicMock()) == "ok"
    assert fn.call_count == 2


def test_delay_is_capped() -> None:
    policy = RetryPolicy(retries=10, base_delay=1.0, max_delay=30.0)
    assert policy.delay_for(5) == 16.0
    assert policy.delay_for(6) == 30.0
