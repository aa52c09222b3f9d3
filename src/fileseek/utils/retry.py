"""Retry decorator for file system calls, using tenacity."""

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

# Errors that mean "try again", not "this file is unreadable"
TRANSIENT_IO_ERRORS: tuple[type[Exception], ...] = (
    InterruptedError,
    BlockingIOError,
)


io_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
    retry=retry_if_exception_type(TRANSIENT_IO_ERRORS),
    reraise=True,
)
"""Retry decorator for stat/open calls.

Retries up to 3 times with short exponential backoff on interrupted or
would-block errors. Works on both sync and async callables.

Usage:
    @io_retry
    async def open_file(path: Path) -> ...:
        ...
"""
