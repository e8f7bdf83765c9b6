"""
미들웨어 패키지
"""

from src.middleware.logging_middleware import RequestLoggingMiddleware
from src.middleware.request_id import RequestIDMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "RequestIDMiddleware",
]
