"""
JFBS Ledger - Database Configuration
PostgreSQL (운영) / SQLite (로컬·테스트) 엔진 및 세션 설정
"""

from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from src.config.app_settings import get_settings

# 환경 변수 로드
load_dotenv()

# Base 모델
Base = declarative_base()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def create_db_engine(
    database_url: str,
    pool_size: int = 20,
    connect_timeout: int = 5,
) -> Engine:
    """
    DB 엔진 생성

    Args:
        database_url: SQLAlchemy 연결 URL
        pool_size: 커넥션 풀 최대 크기
        connect_timeout: 커넥션 수립 타임아웃 (초)

    Returns:
        Engine
    """
    if database_url.startswith("sqlite"):
        # in-memory DB는 모든 세션이 같은 커넥션을 공유해야 함
        poolclass = StaticPool if ":memory:" in database_url else None
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=poolclass,
        )

    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=0,
        pool_pre_ping=True,
        connect_args={"connect_timeout": connect_timeout},
        echo=False,  # True로 설정하면 SQL 로그 출력
    )


def get_engine() -> Engine:
    """설정 기반 엔진 싱글톤 반환 (최초 호출 시 생성)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_db_engine(
            settings.get_database_url(),
            pool_size=settings.db_pool_size,
            connect_timeout=settings.db_connect_timeout,
        )
    return _engine


def get_session_factory() -> sessionmaker:
    """
    SessionFactory 반환 (Dependency Injection용)

    재시도 작업은 시도마다 새 세션을 열고 닫아야 하므로 세션 대신 팩토리를 주입합니다.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


def init_db(engine: Optional[Engine] = None) -> None:
    """
    데이터베이스 초기화
    - accounts 테이블 생성 (이미 있으면 스킵)
    """
    from src.database.models import Account  # noqa: F401  (메타데이터 등록)

    Base.metadata.create_all(bind=engine or get_engine())


def dispose_engine() -> None:
    """엔진 커넥션 풀 정리 (애플리케이션 종료 시)"""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
