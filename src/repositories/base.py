"""
Base Repository Pattern
공통 CRUD 작업을 처리하는 기본 Repository
"""

from typing import Generic, List, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.database.session import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    베이스 Repository 클래스
    생성/조회 작업을 위한 공통 메서드 제공
    """

    def __init__(self, model: Type[ModelType], session: Session):
        """
        Args:
            model: SQLAlchemy 모델 클래스
            session: DB 세션
        """
        self.model = model
        self.session = session

    def create(self, **kwargs) -> ModelType:
        """
        레코드 생성

        Args:
            **kwargs: 모델 필드값

        Returns:
            생성된 모델 인스턴스
        """
        db_obj = self.model(**kwargs)
        self.session.add(db_obj)
        try:
            self.session.commit()
        except SQLAlchemyError:
            # 실패한 트랜잭션 정리 후 전파
            self.session.rollback()
            raise
        self.session.refresh(db_obj)
        return db_obj

    def get_all(self) -> List[ModelType]:
        """전체 목록 조회 (ID 오름차순)"""
        result = self.session.execute(select(self.model).order_by(self.model.id.asc()))
        return list(result.scalars().all())
