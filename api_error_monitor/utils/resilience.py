"""
Resilience utilities for error handling and fault tolerance.

This module provides:
- linear_backoff_delay for the retry queue's delay schedule
- retry_until_success for retrying boolean-returning deliveries
- run_with_timeout for bounding blocking best-effort work
"""

import asyncio
import concurrent.futures
import logging
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


def linear_backoff_delay(base_delay: float, attempt: int) -> float:
    """
    Delay to wait after a failed attempt.

    Attempt n (1-based) waits base_delay * n before the next one.

    Args:
        base_delay: Base delay in seconds
        attempt: Number of the attempt that just failed (1-based)

    Returns:
        Delay in seconds
    """
    return base_delay * max(attempt, 0)


async def retry_until_success(
    operation: Callable[[], Awaitable[bool]],
    max_retries: int = 3,
    base_delay: float = 5.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    name: Optional[str] = None,
) -> bool:
    """
    Retry a boolean-returning coroutine with linear backoff.

    An attempt that raises counts as a failed attempt. No delay is taken
    after the last attempt.

    Args:
        operation: Zero-argument coroutine function returning True on success
        max_retries: Maximum number of attempts (default: 3)
        base_delay: Base delay in seconds between attempts (default: 5.0)
        sleep: Sleep coroutine, injectable for tests
        name: Operation name for log messages

    Returns:
        True if any attempt succeeded, False after exhausting all attempts

    Example:
        delivered = await retry_until_success(
            lambda: reporter.report(report), max_retries=3, base_delay=5.0
        )
    """
    label = name or getattr(operation, "__name__", "operation")

    for attempt in range(1, max_retries + 1):
        try:
            success = await operation()
        except Exception as e:
            logger.warning(f"{label} raised on attempt {attempt}/{max_retries}: {e}")
            success = False

        if success:
            if attempt > 1:
                logger.info(f"{label} succeeded on attempt {attempt}/{max_retries}")
            return True

        if attempt < max_retries:
            delay = linear_backoff_delay(base_delay, attempt)
            logger.debug(
                f"{label} failed on attempt {attempt}/{max_retries}. "
                f"Retrying in {delay:.1f}s..."
            )
            await sleep(delay)

    logger.warning(f"{label} failed after {max_retries} attempts")
    return False


def run_with_timeout(func: Callable[[], T], timeout: float) -> Optional[T]:
    """
    Run blocking work in a worker thread, giving up after a hard timeout.

    The worker thread is not interrupted on timeout; its result is discarded.

    Args:
        func: Zero-argument callable
        timeout: Timeout in seconds

    Returns:
        The callable's result, or None on timeout or error
    """
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    future = executor.submit(func)
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError:
        logger.debug(f"Blocking operation timed out after {timeout}s")
        return None
    except Exception as e:
        logger.debug(f"Blocking operation failed: {e}")
        return None
    finally:
        executor.shutdown(wait=False)
