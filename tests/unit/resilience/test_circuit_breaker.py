"""
서킷 브레이커 테스트

이 테스트 파일은 CircuitBreaker의 상태 전이를 검증합니다.

테스트 커버리지:
1. 연속 실패 시 서킷 오픈
2. 서킷 오픈 시 요청 즉시 거부
3. timeout 경과 후 half-open 상태 전환
4. half-open 상태에서 성공/실패 시 전이
"""

import pytest
from datetime import datetime, timezone, timedelta

from src.resilience.circuit_breaker import (
    CIRCUIT_BREAKER_THRESHOLD,
    CIRCUIT_BREAKER_TIMEOUT_MS,
    CircuitBreaker,
    CircuitBreakerOpenError,
    CircuitState,
    ProbeFailedError,
)


def _expire(breaker: CircuitBreaker, seconds: float = 6) -> None:
    """마지막 OPEN 전환 시각을 과거로 이동"""
    breaker._last_failure_time = datetime.now(timezone.utc) - timedelta(seconds=seconds)


def _open(breaker: CircuitBreaker) -> None:
    for _ in range(breaker.failure_threshold):
        breaker.record_failure()


# =============================================================================
# Test 1: 초기 상태
# =============================================================================

class TestCircuitBreakerDefaults:
    """기본 설정 검증"""

    def test_initial_state_is_closed(self, breaker):
        assert breaker.state == CircuitState.CLOSED
        assert breaker.failure_count == 0
        assert breaker.last_failure_time is None
        assert breaker.is_closed()

    def test_default_thresholds(self, breaker):
        assert CIRCUIT_BREAKER_THRESHOLD == 3
        assert CIRCUIT_BREAKER_TIMEOUT_MS == 5000
        assert breaker.failure_threshold == 3
        assert breaker.timeout == 5.0

    @pytest.mark.parametrize("kwargs", [{"failure_threshold": 0}, {"timeout": -1}])
    def test_invalid_configuration(self, kwargs):
        with pytest.raises(ValueError):
            CircuitBreaker(**kwargs)


# =============================================================================
# Test 2: 연속 실패 시 서킷 오픈
# =============================================================================

class TestCircuitBreakerOpen:
    """서킷 오픈 동작 검증"""

    def test_opens_after_threshold_failures(self, breaker):
        """
        GIVEN: 서킷이 CLOSED 상태
        WHEN: 연속 3회 실패가 기록되면
        THEN: 서킷이 OPEN 상태로 전환되어야 함
        """
        assert breaker.record_failure() == CircuitState.CLOSED
        assert breaker.record_failure() == CircuitState.CLOSED
        assert breaker.record_failure() == CircuitState.OPEN

        assert breaker.is_open()
        assert breaker.failure_count == 3
        assert breaker.last_failure_time is not None

    def test_opens_after_custom_threshold(self):
        breaker = CircuitBreaker(failure_threshold=1)

        assert breaker.record_failure() == CircuitState.OPEN

    def test_success_resets_failure_count_while_closed(self, breaker):
        """
        GIVEN: 2회 실패가 누적된 CLOSED 서킷
        WHEN: 성공이 기록되면
        THEN: 카운트가 0으로 초기화되어 이후 2회 실패로는 열리지 않아야 함
        """
        breaker.record_failure()
        breaker.record_failure()

        breaker.record_success()
        breaker.record_failure()
        breaker.record_failure()

        assert breaker.is_closed()
        assert breaker.failure_count == 2

    def test_open_rejects_calls_immediately(self, breaker):
        """
        GIVEN: 방금 OPEN된 서킷
        WHEN: before_call을 호출하면
        THEN: CircuitBreakerOpenError가 발생하고 상태는 유지되어야 함
        """
        _open(breaker)

        with pytest.raises(CircuitBreakerOpenError) as exc_info:
            breaker.before_call("http://localhost:3000/api/accounts")

        assert str(exc_info.value) == "Circuit Breaker: Service unavailable."
        assert breaker.is_open()
        assert breaker.get_stats()["total_rejected"] == 1

    def test_closed_allows_calls(self, breaker):
        breaker.before_call()

        assert breaker.is_closed()
        assert breaker.get_stats()["total_calls"] == 1


# =============================================================================
# Test 3: timeout 경과 후 half-open 전환
# =============================================================================

class TestCircuitBreakerHalfOpen:
    """HALF_OPEN 전이 검증"""

    def test_transitions_to_half_open_after_timeout(self, breaker):
        """
        GIVEN: OPEN 후 5초를 초과해 경과한 서킷
        WHEN: before_call을 호출하면
        THEN: HALF_OPEN으로 전환되고 호출이 허용되어야 함
        """
        _open(breaker)
        _expire(breaker, seconds=6)

        breaker.before_call()

        assert breaker.is_half_open()

    def test_stays_open_before_timeout(self, breaker):
        _open(breaker)
        _expire(breaker, seconds=4)

        with pytest.raises(CircuitBreakerOpenError):
            breaker.before_call()

        assert breaker.is_open()

    def test_probe_success_closes_circuit(self, breaker):
        """
        GIVEN: HALF_OPEN 서킷
        WHEN: 프로브가 성공하면
        THEN: CLOSED로 돌아가고 실패 카운트가 0이어야 함
        """
        _open(breaker)
        _expire(breaker)
        breaker.before_call()

        breaker.record_success()

        assert breaker.is_closed()
        assert breaker.failure_count == 0

    def test_probe_failure_reopens_circuit(self, breaker):
        """
        GIVEN: HALF_OPEN 서킷
        WHEN: 프로브가 실패하면
        THEN: 즉시 OPEN으로 돌아가고 OPEN 시각이 갱신되어야 함
        """
        _open(breaker)
        _expire(breaker)
        stale = breaker.last_failure_time
        breaker.before_call()

        assert breaker.record_failure() == CircuitState.OPEN
        assert breaker.last_failure_time > stale

        with pytest.raises(CircuitBreakerOpenError):
            breaker.before_call()


# =============================================================================
# Test 4: 통계 및 리셋
# =============================================================================

class TestCircuitBreakerStats:
    """모니터링 정보 검증"""

    def test_get_stats(self, breaker):
        breaker.before_call()
        breaker.record_failure()
        breaker.before_call()
        breaker.record_success()

        stats = breaker.get_stats()

        assert stats["state"] == "closed"
        assert stats["total_calls"] == 2
        assert stats["total_failures"] == 1
        assert stats["total_successes"] == 1
        assert stats["last_failure_time"] is None

    def test_reset(self, breaker):
        _open(breaker)

        breaker.reset()

        assert breaker.is_closed()
        assert breaker.failure_count == 0
        assert breaker.last_failure_time is None

    def test_probe_failed_error_is_open_error(self):
        error = ProbeFailedError()

        assert isinstance(error, CircuitBreakerOpenError)
        assert str(error) == "Circuit Breaker: Service unavailable after test."

    def test_repr(self, breaker):
        assert repr(breaker) == "CircuitBreaker(state=closed, failures=0/3)"
