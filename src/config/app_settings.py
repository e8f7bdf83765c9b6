#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
JFBS Ledger Application Settings
Pydantic Settings v2 기반 환경변수 설정 관리
"""
from typing import Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class AppSettings(BaseSettings):
    """
    애플리케이션 설정 클래스

    Pydantic Settings v2를 사용하여 .env 파일에서 환경변수를 로드합니다.
    서버(Ledger API)와 클라이언트(콘솔 앱)가 같은 설정 클래스를 공유합니다.
    """

    # === Pydantic Settings v2 설정 ===
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === 서버 설정 ===
    port: int = Field(
        default=3000,
        description="Ledger API 리스닝 포트",
    )
    app_id: Optional[str] = Field(
        default=None,
        description="서버 인스턴스 식별자 (로드밸런서 뒤 인스턴스 구분용)",
    )

    # === Database 설정 ===
    db_user: str = Field(default="user", description="DB 사용자")
    db_password: str = Field(default="password", description="DB 비밀번호")
    db_host: str = Field(default="db_primary", description="DB 호스트 (Docker 서비스명)")
    db_port: int = Field(default=5432, description="DB 포트")
    db_name: str = Field(default="jbs_db", description="DB 이름")
    database_url: Optional[str] = Field(
        default=None,
        description="DB 연결 URL (설정 시 db_* 값보다 우선)",
    )
    db_pool_size: int = Field(
        default=20,
        description="커넥션 풀 최대 크기",
    )
    db_connect_timeout: int = Field(
        default=5,
        description="커넥션 수립 타임아웃 (초)",
    )

    # === Client 설정 ===
    api_url: str = Field(
        default="http://localhost:3000",
        description="콘솔 클라이언트가 접속할 Ledger API URL",
    )
    api_timeout: float = Field(
        default=10.0,
        description="클라이언트 요청 타임아웃 (초)",
    )

    # === Logging 설정 ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="로그 레벨",
    )
    log_json: bool = Field(
        default=False,
        description="JSON 포맷 로그 출력 여부 (프로덕션)",
    )

    # === 유효성 검사 ===
    @field_validator("port", "db_port")
    @classmethod
    def validate_port(cls, v: int, info) -> int:
        """포트 범위 검사"""
        if not 1 <= v <= 65535:
            raise ValueError(f"{info.field_name} must be between 1 and 65535")
        return v

    @field_validator("db_pool_size", "db_connect_timeout")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name} must be at least 1")
        return v

    # === 헬퍼 메서드 ===
    def get_database_url(self) -> str:
        """DB 연결 URL 반환 (database_url 우선, 없으면 db_* 값으로 조합)"""
        if self.database_url:
            return self.database_url
        return URL.create(
            "postgresql+psycopg2",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        ).render_as_string(hide_password=False)

    def is_sqlite(self) -> bool:
        """SQLite 사용 여부 (로컬 개발/테스트)"""
        return self.get_database_url().startswith("sqlite")


# === 싱글톤 패턴 구현 ===
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """
    싱글톤 패턴으로 AppSettings 인스턴스 반환

    최초 호출 시 .env 파일에서 환경변수를 로드하여 인스턴스를 생성하고,
    이후 호출에는 캐시된 인스턴스를 반환합니다.

    Returns:
        AppSettings: 애플리케이션 설정 인스턴스
    """
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """
    환경변수를 다시 로드하여 새로운 AppSettings 인스턴스 생성

    Returns:
        AppSettings: 새로운 애플리케이션 설정 인스턴스
    """
    global _settings
    _settings = AppSettings()
    return _settings
