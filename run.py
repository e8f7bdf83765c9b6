#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
JFBS Ledger - CLI Entry Point
계좌 원장 API 콘솔 클라이언트

Usage:
    python run.py                      # 대화형 메뉴
    python run.py list                 # 계좌 목록 출력
    python run.py create Alice 100.50  # 계좌 생성
"""
import argparse
import asyncio
import math
import sys
from pathlib import Path
from typing import Optional

# 프로젝트 루트를 Python 경로에 추가
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

import httpx
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import FloatPrompt, Prompt
from rich.table import Table

from src.clients.api_client import LedgerAPIClient, LedgerAPIError
from src.config.app_settings import get_settings
from src.resilience.circuit_breaker import CircuitBreakerOpenError, CircuitState
from src.utils.logging_config import setup_logging

console = Console()

# 요청 실패로 간주하는 예외 (서킷 OPEN, 전송 실패/5xx, 4xx 응답)
CLIENT_ERRORS = (CircuitBreakerOpenError, LedgerAPIError, httpx.HTTPError, OSError)

INVALID_BALANCE_MESSAGE = "Initial balance must be a finite number, zero or greater."


def is_valid_balance(amount: float) -> bool:
    """0 이상의 유한한 금액인지 확인 (inf, nan 거부)"""
    return math.isfinite(amount) and amount >= 0


def format_error(error: Exception) -> str:
    """사용자 표시용 에러 메시지"""
    if isinstance(error, CircuitBreakerOpenError):
        return f"[bold magenta]{escape(str(error))}[/bold magenta] [dim](try again in a few seconds)[/dim]"
    return escape(str(error))


def show_header(app_id: Optional[str]):
    """헤더 표시"""
    subtitle = f"AppID: {app_id}" if app_id else "AppID: unknown"
    header = Panel(
        "[bold cyan]JFBS - Joseph Fabian Banking System[/bold cyan]\n"
        f"[dim]{subtitle}[/dim]",
        border_style="cyan",
        padding=(1, 2),
    )
    console.print(header)


def show_menu():
    """메뉴 표시"""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Option", style="cyan", width=3)
    table.add_column("Description")

    table.add_row("1", "[bold green]Create account[/bold green] - name and initial balance")
    table.add_row("2", "[bold blue]List accounts[/bold blue] - all accounts by ID")
    table.add_row("3", "[bold yellow]Circuit status[/bold yellow] - breaker state and counters")
    table.add_row("0", "[dim]Exit[/dim]")
    console.print(table)


def show_circuit_status(client: LedgerAPIClient):
    """서킷 브레이커 상태 표시"""
    stats = client.circuit_breaker.get_stats()
    state_style = {
        CircuitState.CLOSED.value: "green",
        CircuitState.OPEN.value: "red",
        CircuitState.HALF_OPEN.value: "yellow",
    }.get(stats["state"], "white")

    table = Table(title="Circuit Breaker")
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("State", f"[{state_style}]{stats['state'].upper()}[/{state_style}]")
    table.add_row("Failures", f"{stats['failure_count']}/{stats['failure_threshold']}")
    table.add_row("Open timeout", f"{stats['timeout_seconds']}s")
    table.add_row("Calls", str(stats["total_calls"]))
    table.add_row("Rejected", str(stats["total_rejected"]))
    table.add_row("Last opened", stats["last_failure_time"] or "-")

    console.print(table)


async def fetch_app_id(client: LedgerAPIClient) -> Optional[str]:
    """응답한 서버 인스턴스 ID 조회 (실패 시 None)"""
    try:
        return await client.get_app_id()
    except CLIENT_ERRORS as e:
        console.print(f"[dim]Could not fetch app ID: {escape(str(e))}[/dim]")
        return None


async def menu_list_accounts(client: LedgerAPIClient) -> bool:
    """계좌 목록 메뉴"""
    console.print("\n[bold cyan]Accounts[/bold cyan]")

    try:
        accounts = await client.list_accounts()
    except CLIENT_ERRORS as e:
        console.print(f"[red]✗ Could not load accounts: {format_error(e)}[/red]")
        return False

    if not accounts:
        console.print("[yellow]No accounts registered yet.[/yellow]")
        return True

    table = Table(title="Registered accounts")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="white")
    table.add_column("Balance", justify="right")

    for account in accounts:
        table.add_row(str(account.id), escape(account.name), f"${account.balance:,.2f}")

    console.print(table)
    return True


async def create_account(client: LedgerAPIClient, name: str, initial_balance: float) -> bool:
    """계좌 생성 후 목록 갱신"""
    if not is_valid_balance(initial_balance):
        console.print(f"[red]✗ {INVALID_BALANCE_MESSAGE}[/red]")
        return False

    try:
        account = await client.create_account(name, initial_balance)
    except CLIENT_ERRORS as e:
        console.print(f"[red]✗ Could not create account: {format_error(e)}[/red]")
        return False

    console.print(f"[green]✓ Account '{escape(account.name)}' created! ID: {account.id}[/green]")
    await menu_list_accounts(client)
    return True


async def menu_create_account(client: LedgerAPIClient) -> bool:
    """계좌 생성 메뉴"""
    console.print("\n[bold cyan]Create new account[/bold cyan]")

    name = Prompt.ask("Name").strip()
    if not name:
        console.print("[red]✗ Name is required.[/red]")
        return False

    initial_balance = FloatPrompt.ask("Initial balance", default=0.0)
    if not is_valid_balance(initial_balance):
        console.print(f"[red]✗ {INVALID_BALANCE_MESSAGE}[/red]")
        return False

    return await create_account(client, name, initial_balance)


async def interactive(client: LedgerAPIClient):
    """대화형 메뉴 루프"""
    app_id = await fetch_app_id(client)
    show_header(app_id)
    await menu_list_accounts(client)

    while True:
        show_menu()
        choice = Prompt.ask(
            "\n[cyan]Select[/cyan]",
            choices=["0", "1", "2", "3"],
            default="0"
        )

        if choice == "0":
            console.print("\n[green]Bye.[/green]\n")
            break
        elif choice == "1":
            await menu_create_account(client)
        elif choice == "2":
            await menu_list_accounts(client)
        elif choice == "3":
            show_circuit_status(client)


def build_parser() -> argparse.ArgumentParser:
    """CLI 인자 파서"""
    parser = argparse.ArgumentParser(description="JFBS ledger console client")
    parser.add_argument(
        "--api-url",
        default=None,
        help="Ledger API base URL (default: API_URL setting)",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("list", help="List accounts")

    create_parser = subparsers.add_parser("create", help="Create an account")
    create_parser.add_argument("name", help="Account name")
    create_parser.add_argument("amount", type=float, help="Initial balance")

    return parser


async def main(argv: Optional[list[str]] = None) -> int:
    """메인 함수"""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(level=settings.log_level, json_output=settings.log_json)

    # 세션 전체에서 하나의 클라이언트(=하나의 서킷 브레이커)를 공유
    async with LedgerAPIClient(
        base_url=args.api_url or settings.api_url,
        timeout=settings.api_timeout,
    ) as client:
        if args.command == "list":
            ok = await menu_list_accounts(client)
        elif args.command == "create":
            if not is_valid_balance(args.amount):
                console.print(f"[red]✗ {INVALID_BALANCE_MESSAGE}[/red]")
                return 2
            ok = await create_account(client, args.name, args.amount)
        else:
            await interactive(client)
            ok = True

    return 0 if ok else 1


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        console.print("\n\n[yellow]Interrupted.[/yellow]")
        sys.exit(0)
