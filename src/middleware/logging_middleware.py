"""
요청/응답 로깅 미들웨어

요청마다 한 줄의 구조화 로그를 남깁니다. 재시도 백오프로 응답이 지연된 요청은
별도의 slow 경고로 표시합니다.
"""

import time
from typing import Callable, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.utils.logging_config import get_logger

logger = get_logger(__name__)

# 느린 요청 기준 (초), 서버 재시도 첫 백오프(1초)와 같음
SLOW_REQUEST_THRESHOLD = 1.0


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    요청/응답 로깅 미들웨어

    기능:
    - 처리 시간 측정 및 느린 요청 경고
    - 상태 코드별 로그 레벨 분리 (5xx ERROR, 4xx WARNING)
    - 지정 경로(헬스 체크) 로깅 생략
    """

    def __init__(
        self,
        app: ASGIApp,
        skip_paths: Optional[list[str]] = None,
        slow_threshold: float = SLOW_REQUEST_THRESHOLD,
    ) -> None:
        """
        Args:
            app: ASGI 애플리케이션
            skip_paths: 로깅을 건너뛸 경로 목록
            slow_threshold: 느린 요청 경고 기준 (초)
        """
        super().__init__(app)
        self.skip_paths = set(skip_paths or ["/health"])
        self.slow_threshold = slow_threshold

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.skip_paths:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            fields = self._request_fields(request, started)
            fields.update(error_type=type(e).__name__, error_message=str(e))
            logger.error("Request failed", extra=fields)
            raise

        fields = self._request_fields(request, started)
        fields["status_code"] = response.status_code

        if response.status_code >= 500:
            logger.error("Request completed with server error", extra=fields)
        elif response.status_code >= 400:
            logger.warning("Request completed with client error", extra=fields)
        else:
            logger.info("Request completed", extra=fields)

        if fields["process_time"] >= self.slow_threshold:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} "
                f"- {fields['process_time']:.3f}s",
                extra=fields,
            )

        return response

    def _request_fields(self, request: Request, started: float) -> Dict[str, object]:
        """로그 extra 필드 (메서드, 경로, 클라이언트, 요청 ID, 처리 시간)"""
        return {
            "method": request.method,
            "path": request.url.path,
            "client": self._get_client_ip(request),
            "request_id": getattr(request.state, "request_id", None),
            "process_time": round(time.perf_counter() - started, 4),
        }

    def _get_client_ip(self, request: Request) -> Optional[str]:
        """클라이언트 IP 주소 추출 (프록시 환경 고려)"""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return None
