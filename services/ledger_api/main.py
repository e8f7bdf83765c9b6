"""
JFBS Ledger - API Server
FastAPI 기반 계좌 원장 API 구현
"""
# ruff: noqa: E402  # dotenv 로드 후 import 필요

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

# 환경변수 로드
load_dotenv()

from src.config.app_settings import get_settings
from src.database.session import dispose_engine, init_db
from src.middleware.logging_middleware import RequestLoggingMiddleware
from src.middleware.request_id import RequestIDMiddleware
from src.utils.logging_config import setup_logging
from services.ledger_api.routes.accounts import router as accounts_router
from services.ledger_api.schemas import AppIdResponse

logger = logging.getLogger(__name__)

VALIDATION_ERROR_MESSAGE = "Name and a valid initial balance are required."


# Lifespan 컨텍스트 매니저
@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 라이프사이클 관리"""
    settings = get_settings()
    setup_logging(level=settings.log_level, json_output=settings.log_json)

    # Startup
    logger.info(f"Ledger API starting (app_id={settings.app_id})")
    try:
        init_db()
        logger.info("Database initialized: accounts table ready")
    except Exception as e:
        # DB가 아직 준비되지 않아도 서버는 기동 (요청 단위 재시도로 복구)
        logger.error(f"Error initializing database: {e}")

    yield

    # Shutdown
    logger.info("Ledger API shutting down")
    dispose_engine()


# FastAPI 앱 생성
app = FastAPI(
    title="JFBS Ledger API",
    description="계좌 생성/조회 API (재시도 및 서킷 브레이커 데모)",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS 미들웨어 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 요청/응답 로깅 미들웨어
app.add_middleware(RequestLoggingMiddleware, skip_paths=["/health"])

# 요청 ID 추적 미들웨어 (가장 바깥, 로깅보다 먼저 ID 바인딩)
app.add_middleware(RequestIDMiddleware)

# Accounts 라우터 포함
app.include_router(accounts_router)


# ============================================================================
# Endpoints
# ============================================================================


@app.get("/health", response_class=PlainTextResponse)
async def health_check():
    """헬스 체크 (로드밸런서/클라이언트 프로브용)"""
    return "OK"


@app.get("/api/app-id", response_model=AppIdResponse)
async def get_app_id():
    """응답한 서버 인스턴스 식별자"""
    return AppIdResponse(appId=get_settings().app_id)


# ============================================================================
# Exception Handlers
# ============================================================================


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """요청 검증 실패 처리"""
    logger.warning(f"Invalid request on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": VALIDATION_ERROR_MESSAGE},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """HTTP 예외 처리"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "message": exc.detail,
            "status_code": exc.status_code,
            "path": str(request.url.path),
        },
    )


def run():
    """uvicorn으로 서버 실행 (PORT 설정 사용)"""
    import uvicorn

    uvicorn.run(
        "services.ledger_api.main:app",
        host="0.0.0.0",
        port=get_settings().port,
    )


if __name__ == "__main__":
    run()
