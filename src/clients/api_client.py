"""
JFBS Ledger API Client
Ledger API 서버와 통신하기 위한 HTTP 클라이언트

모든 요청은 resilient_fetch를 거치며, 클라이언트 인스턴스 하나가 서킷 브레이커
하나를 소유하고 모든 엔드포인트 호출에 공유합니다.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from src.clients.resilient_fetch import (
    DEFAULT_FETCH_DELAY_MS,
    DEFAULT_FETCH_RETRIES,
    resilient_fetch,
)
from src.resilience.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError


class LedgerAPIError(Exception):
    """API가 2xx가 아닌 (5xx 제외) 응답 또는 해석할 수 없는 본문을 반환했을 때 발생하는 예외"""
    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


@dataclass
class Account:
    """계좌 데이터 모델"""

    id: int
    name: str
    balance: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        """딕셔너리에서 Account 객체 생성"""
        return cls(
            id=int(data["id"]),
            name=data["name"],
            balance=float(data.get("balance") or 0),
        )


class LedgerAPIClient:
    """
    Ledger API용 HTTP 클라이언트

    사용 예:
        async with LedgerAPIClient(base_url="http://localhost:3000") as client:
            accounts = await client.list_accounts()
            account = await client.create_account("Alice", 100.0)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 10.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
        max_retries: int = DEFAULT_FETCH_RETRIES,
        initial_delay: int = DEFAULT_FETCH_DELAY_MS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        API 클라이언트 초기화

        Args:
            base_url: API 서버 기본 URL
            timeout: 요청 타임아웃 (초)
            circuit_breaker: 공유할 서킷 브레이커 (None이면 새로 생성)
            max_retries: 요청당 최대 시도 횟수
            initial_delay: 첫 재시도 전 대기 시간 (ms)
            transport: httpx 전송 계층 (테스트용)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.headers = {"Content-Type": "application/json"}
        self.circuit_breaker = circuit_breaker or CircuitBreaker()

        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=self.headers,
            transport=transport,
        )

    async def __aenter__(self) -> "LedgerAPIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """클라이언트 닫기"""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        max_retries: Optional[int] = None,
    ) -> httpx.Response:
        """
        서킷 브레이커 + 재시도가 적용된 요청 전송

        Raises:
            CircuitBreakerOpenError: 서킷 OPEN 또는 프로브 실패
            httpx.HTTPError: 재시도 후에도 전송 실패 또는 5xx
        """
        options: Dict[str, Any] = {}
        if json_data is not None:
            options["json"] = json_data

        return await resilient_fetch(
            self._client,
            method,
            f"{self.base_url}{path}",
            breaker=self.circuit_breaker,
            max_retries=self.max_retries if max_retries is None else max_retries,
            initial_delay=self.initial_delay,
            **options,
        )

    @staticmethod
    def _parse_account(data: Any, status_code: int) -> Account:
        """응답 레코드를 Account로 변환 (형식이 맞지 않으면 LedgerAPIError)"""
        try:
            return Account.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerAPIError(f"Malformed account record: {data!r}", status_code) from e

    @staticmethod
    def _json_or_raise(response: httpx.Response) -> Any:
        """
        성공 응답이면 JSON 반환, 아니면 LedgerAPIError 발생

        서버가 {"message": ...} 본문을 보내면 해당 메시지를 사용합니다.
        """
        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                raise LedgerAPIError(
                    f"Invalid JSON response (status: {response.status_code})",
                    response.status_code,
                ) from e

        message = f"HTTP error! status: {response.status_code}"
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("message"):
            message = data["message"]
        raise LedgerAPIError(message, response.status_code)

    async def health_check(self) -> bool:
        """
        헬스 체크

        Returns:
            서버가 200을 반환하면 True
        """
        try:
            response = await self._request("GET", "/health", max_retries=1)
        except (httpx.HTTPError, OSError, CircuitBreakerOpenError):
            return False
        return response.status_code == 200

    async def get_app_id(self) -> Optional[str]:
        """
        응답한 서버 인스턴스의 App ID 조회

        Returns:
            App ID (서버에 설정되지 않았으면 None)
        """
        response = await self._request("GET", "/api/app-id")
        data = self._json_or_raise(response)
        if not isinstance(data, dict):
            raise LedgerAPIError("Malformed app ID response", response.status_code)
        return data.get("appId")

    async def list_accounts(self) -> List[Account]:
        """
        계좌 목록 조회 (ID 오름차순)

        Returns:
            Account 리스트
        """
        response = await self._request("GET", "/api/accounts")
        data = self._json_or_raise(response)

        if isinstance(data, list):
            return [self._parse_account(item, response.status_code) for item in data]
        raise LedgerAPIError("Malformed account list response", response.status_code)

    async def create_account(self, name: str, initial_balance: float) -> Account:
        """
        계좌 생성

        Args:
            name: 계좌 이름
            initial_balance: 초기 잔액 (0 이상)

        Returns:
            생성된 Account
        """
        response = await self._request(
            "POST",
            "/api/accounts",
            json_data={"name": name, "initialBalance": initial_balance},
        )
        data = self._json_or_raise(response)
        return self._parse_account(data, response.status_code)
