"""
지수 백오프 (Exponential Backoff) 정책

재시도 간 대기 시간 계산을 순수 함수로 분리하여 직접 테스트할 수 있도록 합니다.

    attempt 0 실패 → initial_delay 대기
    attempt 1 실패 → initial_delay * 2 대기
    ...
    마지막 attempt 실패 → 대기 없음 (실패 전파)
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_INITIAL_DELAY_MS = 1000
DEFAULT_BACKOFF_MULTIPLIER = 2


def backoff_delay(
    attempt: int,
    initial_delay: int = DEFAULT_INITIAL_DELAY_MS,
    multiplier: int = DEFAULT_BACKOFF_MULTIPLIER,
) -> int:
    """
    attempt 번호(0부터 시작)에 대한 대기 시간 계산

    Args:
        attempt: 실패한 시도 번호 (0-indexed)
        initial_delay: 첫 대기 시간 (ms)
        multiplier: 백오프 배수

    Returns:
        대기 시간 (ms)
    """
    if attempt < 0:
        raise ValueError("attempt must be non-negative")
    return initial_delay * multiplier ** attempt


@dataclass(frozen=True)
class RetryPolicy:
    """
    재시도 정책 (호출 단위 불변 값)

    Args:
        max_attempts: 최대 시도 횟수 (기본값: 5)
        initial_delay: 첫 재시도 전 대기 시간, ms (기본값: 1000)
        backoff_multiplier: 대기 시간 배수 (기본값: 2)
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay: int = DEFAULT_INITIAL_DELAY_MS
    backoff_multiplier: int = DEFAULT_BACKOFF_MULTIPLIER

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay < 0:
            raise ValueError("initial_delay cannot be negative")

    def schedule(self) -> Iterator[Tuple[int, Optional[int]]]:
        """
        (attempt, delay_ms) 쌍을 순서대로 생성

        delay_ms는 해당 attempt가 실패했을 때 다음 시도 전 대기 시간이며,
        마지막 attempt에서는 None입니다.
        """
        last = self.max_attempts - 1
        for attempt in range(self.max_attempts):
            if attempt == last:
                yield attempt, None
            else:
                yield attempt, backoff_delay(attempt, self.initial_delay, self.backoff_multiplier)

    def delays(self) -> List[int]:
        """마지막 시도를 제외한 모든 대기 시간 목록"""
        return [delay for _, delay in self.schedule() if delay is not None]
