#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
src/config/app_settings.py 테스트

Pydantic Settings v2 기반 AppSettings 클래스 테스트
- 기본값 테스트
- 환경변수 오버라이드 테스트
- 유효성 검사 테스트
- get_settings() 싱글톤 / reload_settings() 테스트
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.config.app_settings import (
    AppSettings,
    get_settings,
    reload_settings,
)


def clean_settings(**env) -> AppSettings:
    """환경변수/.env 영향 없이 AppSettings 생성"""
    with patch.dict(os.environ, env, clear=True):
        return AppSettings(_env_file=None)


# =============================================================================
# AppSettings 기본값 테스트
# =============================================================================
class TestAppSettingsDefaults:
    """AppSettings 기본값 테스트"""

    def test_server_defaults(self):
        settings = clean_settings()

        assert settings.port == 3000
        assert settings.app_id is None

    def test_database_defaults(self):
        """Database 기본값 확인 (docker-compose 기준)"""
        settings = clean_settings()

        assert settings.db_user == "user"
        assert settings.db_host == "db_primary"
        assert settings.db_port == 5432
        assert settings.db_name == "jbs_db"
        assert settings.database_url is None
        assert settings.db_pool_size == 20
        assert settings.db_connect_timeout == 5

    def test_client_defaults(self):
        settings = clean_settings()

        assert settings.api_url == "http://localhost:3000"
        assert settings.api_timeout == 10.0

    def test_logging_defaults(self):
        settings = clean_settings()

        assert settings.log_level == "INFO"
        assert settings.log_json is False


# =============================================================================
# 환경변수 오버라이드 테스트
# =============================================================================
class TestAppSettingsEnvOverride:
    """환경변수 오버라이드 테스트"""

    def test_env_override(self):
        settings = clean_settings(PORT="8080", APP_ID="backend-1", LOG_JSON="true")

        assert settings.port == 8080
        assert settings.app_id == "backend-1"
        assert settings.log_json is True

    def test_env_is_case_insensitive(self):
        settings = clean_settings(db_host="localhost")

        assert settings.db_host == "localhost"

    def test_database_url_built_from_parts(self):
        """
        GIVEN: DATABASE_URL 미설정
        WHEN: get_database_url()을 호출하면
        THEN: DB_* 값으로 PostgreSQL URL을 조합해야 함
        """
        settings = clean_settings(DB_HOST="db", DB_PASSWORD="p@ss")

        url = settings.get_database_url()

        assert url.startswith("postgresql+psycopg2://user:")
        assert url.endswith("@db:5432/jbs_db")
        assert settings.is_sqlite() is False

    def test_database_url_takes_precedence(self):
        settings = clean_settings(DATABASE_URL="sqlite:///:memory:", DB_HOST="ignored")

        assert settings.get_database_url() == "sqlite:///:memory:"
        assert settings.is_sqlite() is True


# =============================================================================
# 유효성 검사 테스트
# =============================================================================
class TestAppSettingsValidation:
    """유효성 검사 테스트"""

    @pytest.mark.parametrize("port", ["0", "70000"])
    def test_invalid_port(self, port):
        with pytest.raises(ValidationError):
            clean_settings(PORT=port)

    def test_invalid_pool_size(self):
        with pytest.raises(ValidationError):
            clean_settings(DB_POOL_SIZE="0")

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            clean_settings(LOG_LEVEL="VERBOSE")


# =============================================================================
# 싱글톤 테스트
# =============================================================================
class TestSettingsSingleton:
    """get_settings() / reload_settings() 테스트"""

    def test_get_settings_returns_same_instance(self):
        assert get_settings() is get_settings()

    def test_reload_settings_picks_up_env(self):
        with patch.dict(os.environ, {"APP_ID": "reloaded"}):
            settings = reload_settings()

            assert settings.app_id == "reloaded"
            assert get_settings() is settings

        reload_settings()
