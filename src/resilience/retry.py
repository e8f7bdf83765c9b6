"""
재시도 실행기 (Retry Executor)

실패할 수 있는 비동기 작업(DB 작업 단위 등)을 지수 백오프로 재시도합니다.
모든 예외를 일시적 장애로 간주하며, 시도 예산이 소진되면 마지막 예외를 그대로 전파합니다.

Usage:
    accounts = await retry_operation(load_accounts)

    @with_retry(max_retries=3)
    async def insert_account(...):
        ...
"""

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from src.resilience.backoff import (
    DEFAULT_INITIAL_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    RetryPolicy,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay: int = DEFAULT_INITIAL_DELAY_MS,
) -> T:
    """
    비동기 작업을 재시도 정책에 따라 실행

    Args:
        operation: 인자 없는 비동기 함수
        max_retries: 최대 시도 횟수
        initial_delay: 첫 재시도 전 대기 시간 (ms), 재시도마다 2배

    Returns:
        작업 반환 값

    Raises:
        Exception: 마지막 시도에서 발생한 예외 (원본 그대로)
    """
    policy = RetryPolicy(max_attempts=max_retries, initial_delay=initial_delay)

    for attempt, delay in policy.schedule():
        try:
            return await operation()
        except Exception as e:
            if delay is None:
                raise
            logger.warning(
                f"Attempt {attempt + 1} failed. Retrying in {delay}ms... {e}"
            )
            await asyncio.sleep(delay / 1000)

    # schedule()은 최소 1회 시도를 보장하므로 도달하지 않음
    raise RuntimeError("retry schedule exhausted without result")


def with_retry(
    max_retries: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay: int = DEFAULT_INITIAL_DELAY_MS,
):
    """
    재시도 데코레이터

    Usage:
        @with_retry(max_retries=3, initial_delay=500)
        async def fetch_rows():
            ...
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await retry_operation(
                lambda: func(*args, **kwargs),
                max_retries=max_retries,
                initial_delay=initial_delay,
            )
        return wrapper
    return decorator
