"""
구조화된 로깅 설정
Python logging 기반 JSON / 컬러 콘솔 로그 시스템
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# 요청 단위 추적 ID (미들웨어에서 바인딩)
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

_STANDARD_ATTRS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "asctime", "taskName",
}


def bind_request_id(request_id: Optional[str]) -> None:
    """현재 컨텍스트에 요청 ID 바인딩"""
    _request_id.set(request_id)


def get_request_id() -> Optional[str]:
    """현재 컨텍스트의 요청 ID 반환"""
    return _request_id.get()


class JSONFormatter(logging.Formatter):
    """JSON 포맷 로그 포매터"""

    def format(self, record: logging.LogRecord) -> str:
        """로그 레코드를 JSON으로 변환"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = get_request_id()
        if request_id:
            log_data["request_id"] = request_id

        # 예외 정보 추가
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # logger.info(..., extra={...})로 전달된 필드
        extra_attrs = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS
        }
        if extra_attrs:
            log_data["extra"] = extra_attrs

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """컬러 콘솔 로그 포매터 (개발용)"""

    # ANSI 색상 코드
    COLORS = {
        "DEBUG": "\033[36m",    # 청록색
        "INFO": "\033[32m",     # 녹색
        "WARNING": "\033[33m",  # 노란색
        "ERROR": "\033[31m",    # 빨간색
        "CRITICAL": "\033[35m", # 마젠타색
    }
    RESET = "\033[0m"

    def __init__(self) -> None:
        # 기본 포맷: [시간] [레벨] [로거] 메시지
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        """로그 레코드에 색상 적용 (다른 핸들러를 위해 levelname 복원)"""
        original = record.levelname
        if original in self.COLORS:
            record.levelname = f"{self.COLORS[original]}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_output: bool = False,
    service_name: str = "jfbs_ledger",
) -> None:
    """
    로깅 시스템 초기화

    Args:
        level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: 로그 파일 경로 (None이면 파일 출력 없음)
        json_output: JSON 포맷 여부 (False이면 컬러 콘솔)
        service_name: 서비스 이름 (로거 식별용)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # 기존 핸들러 제거
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    if json_output:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ColoredFormatter())
    root_logger.addHandler(console_handler)

    # 파일 핸들러 (선택, 항상 JSON)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # 서드파티 라이브러리 로그 레벨 조정
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    root_logger.info(f"Logging initialized: {service_name}, level={level}")


def get_logger(name: str) -> logging.Logger:
    """
    named logger 반환

    Args:
        name: 로거 이름 (보통 __name__ 사용)
    """
    return logging.getLogger(name)
