"""
Accounts Routes
계좌 생성 및 목록 조회 API
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from src.database.session import get_session_factory
from src.repositories.account_repository import AccountRepository
from src.resilience import retry_operation
from services.ledger_api.schemas import (
    AccountCreateRequest,
    AccountResponse,
    ErrorResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


def _server_error(message: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": message, "error": str(exc)},
    )


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={500: {"model": ErrorResponse}},
)
async def create_account(
    request: AccountCreateRequest,
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    계좌 생성

    INSERT는 재시도 실행기 아래에서 수행되며, 시도마다 새 세션을 열고 닫습니다.

    Args:
        request: 계좌 이름과 초기 잔액

    Returns:
        생성된 계좌 (id, name, balance)
    """

    def _insert() -> dict:
        session = session_factory()
        try:
            repo = AccountRepository(session)
            account = repo.create_account(request.name, request.initial_balance)
            return account.to_dict()
        finally:
            session.close()

    async def operation() -> dict:
        return await run_in_threadpool(_insert)

    try:
        account = await retry_operation(operation)
    except Exception as e:
        logger.error(f"Error creating account: {e}", exc_info=True)
        return _server_error("Internal server error while creating account.", e)

    return AccountResponse(**account)


@router.get(
    "",
    response_model=List[AccountResponse],
    responses={500: {"model": ErrorResponse}},
)
async def list_accounts(
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    계좌 목록 조회 (ID 오름차순)

    Returns:
        계좌 리스트
    """

    def _select() -> list[dict]:
        session = session_factory()
        try:
            repo = AccountRepository(session)
            return [account.to_dict() for account in repo.list_accounts()]
        finally:
            session.close()

    async def operation() -> list[dict]:
        return await run_in_threadpool(_select)

    try:
        accounts = await retry_operation(operation)
    except Exception as e:
        logger.error(f"Error listing accounts: {e}", exc_info=True)
        return _server_error("Internal server error while listing accounts.", e)

    return [AccountResponse(**account) for account in accounts]
