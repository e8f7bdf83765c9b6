"""
JFBS Ledger - Database Models
SQLAlchemy 2.0 기반 ORM 모델 정의
"""

from decimal import Decimal

from sqlalchemy import Column, Integer, Numeric, String

from src.database.session import Base


class Account(Base):
    """계좌"""
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    balance = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))

    def to_dict(self) -> dict:
        """API 응답용 딕셔너리 (balance는 float)"""
        return {
            "id": self.id,
            "name": self.name,
            "balance": float(self.balance or 0),
        }

    def __repr__(self):
        return f"<Account(id={self.id}, name={self.name}, balance={self.balance})>"
