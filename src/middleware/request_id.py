"""
Request ID Middleware

요청 추적 ID 생성 및 전파
"""
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.utils.logging_config import bind_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    요청 ID 미들웨어

    각 요청에 고유 ID를 부여하고 로그 컨텍스트와 응답 헤더에 포함합니다.
    클라이언트가 X-Request-ID를 보내면 그 값을 그대로 사용합니다.

    ## 사용법
    ```python
    app.add_middleware(RequestIDMiddleware)
    ```
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        request.state.request_id = request_id
        bind_request_id(request_id)

        try:
            response = await call_next(request)
        finally:
            bind_request_id(None)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
