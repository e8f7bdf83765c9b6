"""
Ledger API Pydantic 모델
요청 검증 및 응답 직렬화를 위한 데이터 모델 정의
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Request Models
# ============================================================================


class AccountCreateRequest(BaseModel):
    """계좌 생성 요청 모델"""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, description="계좌 이름")
    # 숫자 문자열("100")은 허용하지 않음
    initial_balance: float = Field(
        ...,
        alias="initialBalance",
        ge=0,
        strict=True,
        description="초기 잔액",
    )


# ============================================================================
# Response Models
# ============================================================================


class AccountResponse(BaseModel):
    """계좌 응답 모델"""

    id: int
    name: str
    balance: float


class AppIdResponse(BaseModel):
    """인스턴스 식별 응답 모델"""

    appId: Optional[str] = None


class ErrorResponse(BaseModel):
    """에러 응답 모델"""

    message: str
    error: Optional[str] = None
