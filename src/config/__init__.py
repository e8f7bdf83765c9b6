#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
JFBS Ledger Configuration Package
계좌 원장 시스템 설정 패키지
"""

from src.config.app_settings import (
    AppSettings,
    get_settings,
    reload_settings,
)

__all__ = [
    "AppSettings",
    "get_settings",
    "reload_settings",
]
