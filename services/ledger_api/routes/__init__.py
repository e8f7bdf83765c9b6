"""
Ledger API 라우터
"""
