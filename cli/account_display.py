"""Account display functionality for CLI"""

import json
from typing import Any, Dict

from rich.console import Console
from rich.table import Table

from codex_oauth import Account, TokenResponse


def mask_token(token: str, visible: int = 6) -> str:
    """
    Mask a token for display, keeping only its first characters

    Args:
        token: Token to mask
        visible: Number of leading characters to keep

    Returns:
        Masked token, or "-" when empty
    """
    if not token:
        return "-"
    if len(token) <= visible * 2:
        return "*" * len(token)
    return f"{token[:visible]}...({len(token)} chars)"


def format_expiry(seconds: float) -> str:
    """Human readable time until expiry"""
    if seconds <= 0:
        return "expired"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def show_account(account: Account, console: Console):
    """
    Display an authenticated account

    Args:
        account: Account returned by the OAuth flow
        console: Rich console for output
    """
    table = Table(title="Codex Account")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Email", account.email)
    table.add_row("Account ID", account.account_id)
    table.add_row("Plan", account.plan_type)
    table.add_row("Expires At", account.expires_at.isoformat())
    table.add_row("Time Until Expiry", format_expiry(account.expires_in))
    table.add_row("Access Token", mask_token(account.access_token))
    table.add_row("Refresh Token", mask_token(account.refresh_token))
    table.add_row("ID Token", mask_token(account.id_token))

    console.print(table)


def show_token_response(tokens: TokenResponse, console: Console):
    """Display a refreshed token response"""
    table = Table(title="Refreshed Tokens")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Access Token", mask_token(tokens.access_token))
    table.add_row(
        "Refresh Token",
        mask_token(tokens.refresh_token) if tokens.refresh_token else "(not rotated)",
    )
    table.add_row("ID Token", mask_token(tokens.id_token or ""))
    table.add_row("Expires In", f"{tokens.expires_in}s")

    console.print(table)


def to_json(data: Dict[str, Any]) -> str:
    return json.dumps(data, indent=2)
