"""
Resilient Fetch
httpx 요청에 지수 백오프 재시도와 서킷 브레이커를 적용하는 래퍼

- 5xx 응답은 전송이 성공했더라도 실패로 간주하여 재시도
- 4xx 등 그 밖의 응답은 성공으로 간주하고 그대로 반환
- 실패 카운트는 시도(attempt) 단위로 누적되므로, 한 번의 호출이 내부 재시도만으로
  서킷을 열 수 있음
"""

import asyncio
import logging
from typing import Any, Dict

import httpx

from src.resilience.backoff import RetryPolicy
from src.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    CircuitState,
    ProbeFailedError,
)

DEFAULT_FETCH_RETRIES = 3
DEFAULT_FETCH_DELAY_MS = 1000

# 재시도/서킷 판정 대상 예외 (전송 오류 + 5xx로 변환된 HTTPStatusError)
RETRYABLE_EXCEPTIONS = (httpx.HTTPError, OSError)

logger = logging.getLogger(__name__)


def raise_for_server_error(response: httpx.Response) -> httpx.Response:
    """
    5xx 응답이면 HTTPStatusError 발생

    Args:
        response: httpx 응답

    Returns:
        5xx가 아니면 원본 응답
    """
    if response.status_code >= 500:
        raise httpx.HTTPStatusError(
            f"Server error: {response.status_code}",
            request=response.request,
            response=response,
        )
    return response


async def resilient_fetch(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    breaker: CircuitBreaker,
    max_retries: int = DEFAULT_FETCH_RETRIES,
    initial_delay: int = DEFAULT_FETCH_DELAY_MS,
    **options: Any,
) -> httpx.Response:
    """
    서킷 브레이커 + 재시도가 적용된 HTTP 요청

    Args:
        client: 요청에 사용할 httpx 비동기 클라이언트
        method: HTTP 메서드
        url: 요청 URL
        breaker: 모든 호출부가 공유하는 서킷 브레이커
        max_retries: 최대 시도 횟수
        initial_delay: 첫 재시도 전 대기 시간 (ms)
        **options: client.request()에 전달할 추가 인자 (json, params, headers 등)

    Returns:
        5xx가 아닌 응답 (4xx 포함)

    Raises:
        CircuitBreakerOpenError: 서킷이 OPEN이거나 이번 실패로 임계값에 도달했을 때
        ProbeFailedError: HALF_OPEN 프로브가 실패했을 때
        httpx.HTTPError: 시도 예산 소진 후 마지막 실패
    """
    policy = RetryPolicy(max_attempts=max_retries, initial_delay=initial_delay)

    # 최상위 호출당 1회만 검사 (재시도마다 검사하지 않음)
    breaker.before_call(url)
    probing = breaker.is_half_open()

    try:
        return await _fetch_with_retries(client, method, url, breaker, policy, probing, options)
    except BaseException:
        # 취소 또는 예상 밖 예외로 끝난 프로브도 실패로 판정 (HALF_OPEN 잔류 방지)
        if probing and breaker.is_half_open():
            logger.warning(f"Circuit breaker: probe aborted, re-opening circuit for {url}")
            breaker.record_failure()
        raise


async def _fetch_with_retries(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    breaker: CircuitBreaker,
    policy: RetryPolicy,
    probing: bool,
    options: Dict[str, Any],
) -> httpx.Response:
    """시도 루프 (시도마다 서킷에 성공/실패 기록)"""
    for attempt, delay in policy.schedule():
        try:
            response = await client.request(method, url, **options)
            raise_for_server_error(response)
        except RETRYABLE_EXCEPTIONS as e:
            state = breaker.record_failure()

            if probing:
                logger.warning(f"Circuit breaker: probe failed, re-opening circuit for {url}")
                raise ProbeFailedError() from e

            if state == CircuitState.OPEN:
                logger.error(f"Circuit breaker: threshold reached, opening circuit for {url}")
                raise CircuitBreakerOpenError() from e

            if delay is None:
                raise

            logger.warning(
                f"Attempt {attempt + 1} failed for {url}. Retrying in {delay}ms... {e}"
            )
            await asyncio.sleep(delay / 1000)
        else:
            breaker.record_success()
            return response

    raise RuntimeError("retry schedule exhausted without result")
