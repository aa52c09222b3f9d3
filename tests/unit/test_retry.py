"""Unit tests for retry utilities."""

from unittest.mock import Mock

import pytest

from fileseek.utils.retry import io_retry


class TestIORetry:
    """Tests for the io_retry decorator."""

    def test_io_retry_success_no_retry(self) -> None:
        """Test that successful calls don't retry."""
        mock_func = Mock(return_value="success")
        decorated = io_retry(mock_func)

        result = decorated()

        assert result == "success"
        assert mock_func.call_count == 1

    def test_io_retry_on_interrupted(self) -> None:
        """Test retry on an interrupted system call."""
        mock_func = Mock(side_effect=[InterruptedError("EINTR"), "success"])
        decorated = io_retry(mock_func)

        result = decorated()

        assert result == "success"
        assert mock_func.call_count == 2

    def test_io_retry_on_blocking(self) -> None:
        """Test retry on a would-block error."""
        mock_func = Mock(side_effect=[BlockingIOError("EAGAIN"), "success"])
        decorated = io_retry(mock_func)

        assert decorated() == "success"
        assert mock_func.call_count == 2

    def test_io_retry_max_attempts_exceeded(self) -> None:
        """Test that the last error is raised after three attempts."""
        mock_func = Mock(side_effect=InterruptedError("EINTR"))
        decorated = io_retry(mock_func)

        with pytest.raises(InterruptedError):
            decorated()

        assert mock_func.call_count == 3

    def test_io_retry_not_found_not_retried(self) -> None:
        """Test that permanent errors are raised immediately."""
        mock_func = Mock(side_effect=FileNotFoundError("missing"))
        decorated = io_retry(mock_func)

        with pytest.raises(FileNotFoundError):
            decorated()

        assert mock_func.call_count == 1

    async def test_io_retry_async(self) -> None:
        """Test the decorator works on coroutines."""
        calls = 0

        @io_retry
        async def flaky() -> str:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise InterruptedError("EINTR")
            return "done"

        assert await flaky() == "done"
        assert calls == 2

