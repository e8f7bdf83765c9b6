"""
Account Repository
계좌 데이터 접근 계층
"""

from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from src.database.models import Account
from src.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """
    Account Repository
    계좌 생성/목록 조회 처리
    """

    def __init__(self, session: Session):
        super().__init__(Account, session)

    def create_account(self, name: str, initial_balance: float) -> Account:
        """
        계좌 생성

        Args:
            name: 계좌 이름
            initial_balance: 초기 잔액 (소수점 2자리로 저장)

        Returns:
            생성된 Account
        """
        balance = Decimal(str(initial_balance)).quantize(Decimal("0.01"))
        return self.create(name=name, balance=balance)

    def list_accounts(self) -> List[Account]:
        """전체 계좌 목록 (ID 오름차순)"""
        return self.get_all()
