"""
로깅 설정 테스트
"""

import pytest
import logging
import json
import sys
import tempfile
from pathlib import Path

from src.utils.logging_config import (
    setup_logging,
    get_logger,
    bind_request_id,
    get_request_id,
    JSONFormatter,
    ColoredFormatter,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """테스트 후 루트 로거 상태 복원"""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    bind_request_id(None)


def make_record(message: str = "hello", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSetupLogging:
    """setup_logging 함수 테스트"""

    def test_setup_logging_default(self):
        """기본 설정 테스트"""
        setup_logging()

        root_logger = logging.getLogger()
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, ColoredFormatter)

    def test_setup_logging_debug_level(self):
        """DEBUG 레벨 설정 테스트"""
        setup_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_json_console(self):
        setup_logging(json_output=True)

        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_setup_logging_with_file(self):
        """파일 출력 테스트 (항상 JSON)"""
        with tempfile.TemporaryDirectory() as tmp:
            log_file = Path(tmp) / "logs" / "ledger.log"

            setup_logging(level="INFO", log_file=str(log_file))
            get_logger("test").info("Test message")

            for handler in logging.getLogger().handlers:
                handler.flush()

            lines = log_file.read_text(encoding="utf-8").strip().splitlines()
            payload = json.loads(lines[-1])
            assert payload["message"] == "Test message"
            assert payload["logger"] == "test"

            for handler in logging.getLogger().handlers:
                handler.close()

    def test_third_party_loggers_quieted(self):
        setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


class TestJSONFormatter:
    """JSONFormatter 테스트"""

    def test_basic_fields(self):
        payload = json.loads(JSONFormatter().format(make_record("Account created")))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "test.logger"
        assert payload["message"] == "Account created"
        assert payload["timestamp"].endswith("Z")
        assert "request_id" not in payload

    def test_extra_fields(self):
        record = make_record(status_code=201, path="/api/accounts")

        payload = json.loads(JSONFormatter().format(record))

        assert payload["extra"] == {"status_code": 201, "path": "/api/accounts"}

    def test_request_id_included(self):
        bind_request_id("req-123")

        payload = json.loads(JSONFormatter().format(make_record()))

        assert payload["request_id"] == "req-123"

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        payload = json.loads(JSONFormatter().format(record))

        assert "ValueError: boom" in payload["exception"]


class TestColoredFormatter:
    """ColoredFormatter 테스트"""

    def test_level_is_colored(self):
        output = ColoredFormatter().format(make_record(level=logging.WARNING))

        assert "\033[33m" in output
        assert "hello" in output

    def test_levelname_is_restored(self):
        record = make_record(level=logging.ERROR)

        ColoredFormatter().format(record)

        assert record.levelname == "ERROR"


class TestRequestIdContext:
    """요청 ID 컨텍스트 테스트"""

    def test_default_is_none(self):
        assert get_request_id() is None

    def test_bind_and_clear(self):
        bind_request_id("abc")
        assert get_request_id() == "abc"

        bind_request_id(None)
        assert get_request_id() is None
