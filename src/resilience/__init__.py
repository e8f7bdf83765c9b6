"""
Resilience 패턴 모듈

지수 백오프 재시도, 서킷 브레이커 등 회복 탄력성 패턴을 구현합니다.
"""

from src.resilience.backoff import (
    RetryPolicy,
    backoff_delay,
)
from src.resilience.retry import (
    retry_operation,
    with_retry,
)
from src.resilience.circuit_breaker import (
    CIRCUIT_BREAKER_THRESHOLD,
    CIRCUIT_BREAKER_TIMEOUT_MS,
    CircuitBreaker,
    CircuitState,
    CircuitBreakerOpenError,
    ProbeFailedError,
)

__all__ = [
    "RetryPolicy",
    "backoff_delay",
    "retry_operation",
    "with_retry",
    "CIRCUIT_BREAKER_THRESHOLD",
    "CIRCUIT_BREAKER_TIMEOUT_MS",
    "CircuitBreaker",
    "CircuitState",
    "CircuitBreakerOpenError",
    "ProbeFailedError",
]
