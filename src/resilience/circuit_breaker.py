"""
서킷 브레이커 (Circuit Breaker) 패턴 구현

백엔드 장애 시 반복 요청으로 서버를 더 압박하지 않도록, 연속 실패가 임계값에
도달하면 일정 시간 동안 요청을 네트워크 호출 없이 거부합니다.

상태 전환:
    CLOSED → OPEN: 연속 실패가 threshold(3) 도달 시
    OPEN → HALF_OPEN: 마지막 실패 후 timeout(5000ms) 초과 경과 시
    HALF_OPEN → CLOSED: 프로브 요청 성공 시 (실패 카운트 리셋)
    HALF_OPEN → OPEN: 프로브 요청 실패 시 (실패 시각 갱신)

동시성:
    asyncio 단일 스레드 협력 스케줄링을 전제로 하며 락을 두지 않습니다.
    모든 상태 변경 메서드는 await 없이 읽기-수정-쓰기를 끝내야 합니다.
    스레드 환경에서 공유할 경우 호출부에서 별도 락이 필요합니다.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

CIRCUIT_BREAKER_THRESHOLD = 3
CIRCUIT_BREAKER_TIMEOUT_MS = 5000

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """서킷 브레이커 상태"""
    CLOSED = "closed"       # 정상 상태, 요청 전달
    OPEN = "open"           # 차단 상태, 요청 거부
    HALF_OPEN = "half_open" # 복구 확인, 프로브 1회 허용


class CircuitBreakerOpenError(Exception):
    """서킷이 OPEN 상태라 요청을 시도하지 않고 거부할 때 발생하는 예외"""
    def __init__(self, message: str = "Circuit Breaker: Service unavailable.") -> None:
        self.message = message
        super().__init__(self.message)


class ProbeFailedError(CircuitBreakerOpenError):
    """HALF_OPEN 프로브 요청이 실패해 서킷이 다시 열렸을 때 발생하는 예외"""
    def __init__(self, message: str = "Circuit Breaker: Service unavailable after test.") -> None:
        super().__init__(message)


class CircuitBreaker:
    """
    서킷 브레이커 상태 객체

    클라이언트 프로세스(또는 클라이언트 인스턴스)당 하나를 생성하여 모든 호출부에
    주입합니다. 엔드포인트별로 나누지 않으므로 어느 엔드포인트의 실패든 전체 서킷을
    열 수 있습니다.

    Args:
        failure_threshold: 연속 실패 임계값 (기본값: 3)
        timeout: OPEN 상태 유지 시간 (초, 기본값: 5)

    Usage:
        breaker = CircuitBreaker()

        breaker.before_call(url)          # OPEN이면 CircuitBreakerOpenError
        try:
            response = await send()
        except httpx.HTTPError:
            state = breaker.record_failure()
            ...
        else:
            breaker.record_success()
    """

    def __init__(
        self,
        failure_threshold: int = CIRCUIT_BREAKER_THRESHOLD,
        timeout: float = CIRCUIT_BREAKER_TIMEOUT_MS / 1000,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if timeout < 0:
            raise ValueError("timeout cannot be negative")

        self._failure_threshold = failure_threshold
        self._timeout = timeout

        # 상태 관리
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[datetime] = None

        # 모니터링
        self._total_calls = 0
        self._total_successes = 0
        self._total_failures = 0
        self._total_rejected = 0

    @property
    def state(self) -> CircuitState:
        """현재 상태 반환"""
        return self._state

    @property
    def failure_count(self) -> int:
        """현재 연속 실패 카운트 반환"""
        return self._failure_count

    @property
    def last_failure_time(self) -> Optional[datetime]:
        """마지막 OPEN 전환 시각 (UTC)"""
        return self._last_failure_time

    @property
    def failure_threshold(self) -> int:
        return self._failure_threshold

    @property
    def timeout(self) -> float:
        return self._timeout

    def is_closed(self) -> bool:
        """CLOSED 상태 여부 확인"""
        return self._state == CircuitState.CLOSED

    def is_open(self) -> bool:
        """OPEN 상태 여부 확인"""
        return self._state == CircuitState.OPEN

    def is_half_open(self) -> bool:
        """HALF_OPEN 상태 여부 확인"""
        return self._state == CircuitState.HALF_OPEN

    def before_call(self, target: str = "") -> None:
        """
        최상위 호출 1회당 한 번 실행되는 진입 검사

        Args:
            target: 로그용 요청 대상 (URL 등)

        Raises:
            CircuitBreakerOpenError: OPEN 상태이고 timeout이 경과하지 않았을 때
        """
        self._total_calls += 1

        if self._state != CircuitState.OPEN:
            return

        if self._should_attempt_reset():
            self._state = CircuitState.HALF_OPEN
            logger.info(f"Circuit breaker: OPEN → HALF_OPEN, probing {target}")
            return

        self._total_rejected += 1
        logger.warning(f"Circuit breaker is OPEN. Request rejected for {target}")
        raise CircuitBreakerOpenError()

    def _should_attempt_reset(self) -> bool:
        """
        OPEN 상태에서 HALF_OPEN으로 전환할지 확인

        Returns:
            마지막 실패 이후 timeout을 초과해 경과했으면 True
        """
        if self._last_failure_time is None:
            return True

        elapsed = (datetime.now(timezone.utc) - self._last_failure_time).total_seconds()
        return elapsed > self._timeout

    def record_success(self) -> None:
        """성공 처리"""
        self._total_successes += 1

        if self._state != CircuitState.CLOSED:
            logger.info(f"Circuit breaker: {self._state.name} → CLOSED transition (success)")
            self._transition_to_closed()
        else:
            self._failure_count = 0

    def record_failure(self) -> CircuitState:
        """
        실패 처리

        Returns:
            처리 후 상태 (OPEN이면 호출부는 남은 재시도를 포기해야 함)
        """
        self._total_failures += 1

        if self._state == CircuitState.HALF_OPEN:
            logger.warning("Circuit breaker: HALF_OPEN → OPEN transition (probe failed)")
            self._transition_to_open()
            return self._state

        self._failure_count += 1
        if self._failure_count >= self._failure_threshold and self._state != CircuitState.OPEN:
            logger.error(
                f"Circuit breaker: Failure threshold ({self._failure_threshold}) reached, "
                f"transitioning to OPEN"
            )
            self._transition_to_open()
        return self._state

    def _transition_to_closed(self) -> None:
        """CLOSED 상태로 전환"""
        self._state = CircuitState.CLOSED
        self._failure_count = 0

    def _transition_to_open(self) -> None:
        """OPEN 상태로 전환"""
        self._state = CircuitState.OPEN
        self._last_failure_time = datetime.now(timezone.utc)
        logger.warning(f"Circuit breaker: Transitioned to OPEN (failures: {self._failure_count})")

    def get_stats(self) -> dict:
        """
        서킷 브레이커 통계 정보 반환

        Returns:
            통계 정보 딕셔너리
        """
        return {
            "state": self._state.value,
            "failure_count": self._failure_count,
            "failure_threshold": self._failure_threshold,
            "timeout_seconds": self._timeout,
            "total_calls": self._total_calls,
            "total_successes": self._total_successes,
            "total_failures": self._total_failures,
            "total_rejected": self._total_rejected,
            "last_failure_time": self._last_failure_time.isoformat() if self._last_failure_time else None,
        }

    def reset(self) -> None:
        """서킷 브레이커 상태 리셋 (테스트 또는 수동 복구용)"""
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time = None
        logger.info("Circuit breaker: Manually reset to CLOSED")

    def __repr__(self) -> str:
        return (
            f"CircuitBreaker(state={self._state.value}, "
            f"failures={self._failure_count}/{self._failure_threshold})"
        )
