"""
Pytest Configuration
테스트 설정 및 Fixture 정의
"""

import pytest
import sys
from pathlib import Path
import os

# 경로 설정
sys.path.insert(0, str(Path(__file__).parent.parent))

# 테스트는 항상 in-memory SQLite 사용
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")


# ============================================================================
# 마커 정의
# ============================================================================

def pytest_configure(config):
    """Pytest 설정 훅 - 마커 등록"""
    config.addinivalue_line(
        "markers",
        "integration: 통합 테스트 마커 (FastAPI 앱 + SQLite)"
    )
    config.addinivalue_line(
        "markers",
        "unit: 단위 테스트 마커 (외부 의존성 없음)"
    )


@pytest.fixture
def mock_session():
    """
    Mock DB Session (실제 DB 없이 테스트용)
    unittest.mock.Mock 객체 반환
    """
    from unittest.mock import MagicMock

    return MagicMock()


@pytest.fixture
def breaker():
    """기본 설정(임계값 3, 5초) 서킷 브레이커"""
    from src.resilience.circuit_breaker import CircuitBreaker

    return CircuitBreaker()


@pytest.fixture
def sqlite_engine():
    """accounts 테이블이 생성된 in-memory SQLite 엔진"""
    from src.database.session import create_db_engine, init_db

    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    """테스트용 SessionFactory"""
    from sqlalchemy.orm import sessionmaker

    return sessionmaker(bind=sqlite_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    """
    테스트용 DB 세션
    각 테스트 후 자동으로 닫힘
    """
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
