"""CLI entry point and argument parsing"""

import argparse
import asyncio
import logging
import os
import sys

from rich.console import Console

import settings
from cli.account_display import show_account, show_token_response, to_json
from codex_oauth import OAuthError, OAuthOrchestrator


console = Console()
logger = logging.getLogger(__name__)


def setup_logging(debug: bool):
    """
    Configure root logging

    Args:
        debug: Log at DEBUG level and append to the debug log file
    """
    root_logger = logging.getLogger()
    level = logging.DEBUG if debug else getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO)
    root_logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if debug:
        log_file = os.path.abspath(settings.DEBUG_LOG_FILE)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.info(f"Debug logging enabled - appending to {log_file}")


async def run_login(orchestrator: OAuthOrchestrator, as_json: bool):
    """Run the browser login flow and print the resulting account"""
    if not as_json:
        console.print("[cyan]Starting OpenAI OAuth login...[/cyan]")
        console.print("A browser window will open. Sign in with the account to add.")

    account = await orchestrator.authenticate()

    if as_json:
        print(to_json(account.to_dict()))
    else:
        console.print(f"[green]✓ Authenticated {account.email}[/green]")
        show_account(account, console)


async def run_refresh(orchestrator: OAuthOrchestrator, refresh_token: str, as_json: bool):
    """Exchange a refresh token and print the new tokens"""
    tokens = await orchestrator.refresh_access_token(refresh_token)

    if as_json:
        print(to_json(tokens.model_dump(exclude_none=True)))
    else:
        console.print("[green]✓ Tokens refreshed[/green]")
        show_token_response(tokens, console)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Codex account OAuth helper")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON (tokens unmasked)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("login", help="Add an account through the browser login flow")
    refresh_parser = subparsers.add_parser("refresh", help="Exchange a refresh token for new tokens")
    refresh_parser.add_argument("refresh_token", help="OAuth refresh token")

    return parser


def main(argv=None):
    """Entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.debug)
    orchestrator = OAuthOrchestrator()

    try:
        if args.command == "login":
            asyncio.run(run_login(orchestrator, args.json))
        elif args.command == "refresh":
            asyncio.run(run_refresh(orchestrator, args.refresh_token, args.json))
    except OAuthError as e:
        console.print(f"[red]ERROR:[/red] [{e.code}] {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    main()
