"""
JFBS Ledger API 서비스
"""
