#!/usr/bin/env python3
"""
Command-line interface for fantasy league syncing.

Usage:
    fantasy-sync oauth-url --provider yahoo --state abc123
    fantasy-sync exchange-code --provider yahoo --code XYZ
    fantasy-sync validate-auth --provider espn --cookie "espn_s2=...; SWID=..."
    fantasy-sync setup --provider sleeper
    fantasy-sync sync --user 123456 --provider sleeper
    fantasy-sync sync --user me --provider yahoo --access-token TOKEN --strict

OAuth client credentials default to YAHOO_CLIENT_ID / YAHOO_CLIENT_SECRET,
CBS_CLIENT_ID / CBS_CLIENT_SECRET and OAUTH_REDIRECT_URI. ``sync`` writes to
Postgres when DATABASE_URL is set and to an in-memory store otherwise.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import Optional

from .core.cancellation import CancellationToken
from .core.config import Settings, get_settings
from .core.errors import SyncCancelledError, TokenExchangeError, UnsupportedOperationError
from .core.types import AuthStyle, Provider, get_provider_config

logger = logging.getLogger("fantasy_sync.cli")

PROVIDER_CHOICES = [provider.value for provider in Provider]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def _oauth_client(
    settings: Settings, provider: str, args: argparse.Namespace
) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """Resolve (client_id, client_secret, redirect_uri) from flags, then settings."""
    client_id, client_secret = settings.oauth_clients.get(provider, (None, None))
    return (
        getattr(args, "client_id", None) or client_id,
        getattr(args, "client_secret", None) or client_secret,
        getattr(args, "redirect_uri", None) or settings.oauth_redirect_uri,
    )


# =============================================================================
# Auth commands
# =============================================================================


def cmd_oauth_url(args: argparse.Namespace) -> int:
    """Print the authorization URL for an OAuth provider."""
    from .oauth import build_authorization_url

    client_id, _, redirect_uri = _oauth_client(get_settings(), args.provider, args)
    if not client_id or not redirect_uri:
        logger.error("Client id and redirect URI are required (flags or environment)")
        return 1

    try:
        print(build_authorization_url(args.provider, client_id, redirect_uri, args.state))
    except UnsupportedOperationError as e:
        logger.error("%s", e)
        return 1
    return 0


async def cmd_exchange_code_async(args: argparse.Namespace) -> int:
    """Exchange an authorization code and print the token response."""
    from .oauth import exchange_code_for_token

    client_id, client_secret, redirect_uri = _oauth_client(get_settings(), args.provider, args)
    if not client_id or not client_secret or not redirect_uri:
        logger.error("Client id, client secret and redirect URI are required")
        return 1

    try:
        token = await exchange_code_for_token(
            args.provider, args.code, client_id, client_secret, redirect_uri
        )
    except (UnsupportedOperationError, TokenExchangeError) as e:
        logger.error("%s", e)
        return 1

    _print_json(token.model_dump(exclude_none=True))
    return 0


def cmd_exchange_code(args: argparse.Namespace) -> int:
    """Wrapper to run async exchange command."""
    return asyncio.run(cmd_exchange_code_async(args))


def cmd_validate_auth(args: argparse.Namespace) -> int:
    """Check that the credential a provider needs was supplied."""
    from .oauth import validate_provider_auth

    result = validate_provider_auth(args.provider, args.access_token, args.cookie)
    _print_json(result.model_dump(exclude_none=True))
    return 0 if result.valid else 1


def cmd_setup(args: argparse.Namespace) -> int:
    """Print setup instructions for a provider."""
    from .oauth import get_provider_setup_instructions

    _print_json(get_provider_setup_instructions(args.provider).model_dump())
    return 0


# =============================================================================
# Sync command
# =============================================================================


async def cmd_sync_async(args: argparse.Namespace) -> int:
    """Sync every league of a user across the requested providers."""
    from .manager import FantasyProviderManager
    from .store import get_store

    settings = get_settings()
    if args.strict:
        settings = settings.model_copy(update={"strict_mode": True})

    store = await get_store(settings.database_url)
    manager = FantasyProviderManager(store=store, settings=settings)

    for name in args.provider or [Provider.sleeper.value]:
        auth_style = get_provider_config(name).auth_style
        manager.initialize_provider(
            name,
            access_token=args.access_token if auth_style is AuthStyle.oauth2 else None,
            cookie_string=args.cookie if auth_style is AuthStyle.cookie else None,
        )

    cancel_token = CancellationToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_token.cancel, "Interrupted")
    except (NotImplementedError, RuntimeError):
        # Signal handlers are unavailable on some platforms/loops
        pass

    try:
        summary = await manager.sync_all_user_leagues(args.user, cancel_token)
    except SyncCancelledError as e:
        logger.error("Sync cancelled: %s", e)
        return 1
    finally:
        await manager.close()
        await store.close()

    _print_json(summary.model_dump(mode="json"))
    logger.info(
        "Synced %d leagues with %d errors", summary.total_leagues, len(summary.errors)
    )
    if summary.reauth_required:
        logger.warning("Re-authentication required for: %s", ", ".join(summary.reauth_required))
    return 0 if summary.success else 1


def cmd_sync(args: argparse.Namespace) -> int:
    """Wrapper to run async sync command."""
    return asyncio.run(cmd_sync_async(args))


# =============================================================================
# Entry point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fantasy league sync CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # oauth-url command
    url_parser = subparsers.add_parser("oauth-url", help="Print an OAuth authorization URL")
    url_parser.add_argument("--provider", required=True, choices=PROVIDER_CHOICES)
    url_parser.add_argument("--state", help="Opaque state echoed back on redirect")
    url_parser.add_argument("--client-id", help="OAuth client id (default: from environment)")
    url_parser.add_argument("--redirect-uri", help="Redirect URI (default: OAUTH_REDIRECT_URI)")

    # exchange-code command
    exchange_parser = subparsers.add_parser(
        "exchange-code", help="Exchange an authorization code for tokens"
    )
    exchange_parser.add_argument("--provider", required=True, choices=PROVIDER_CHOICES)
    exchange_parser.add_argument("--code", required=True, help="Authorization code")
    exchange_parser.add_argument("--client-id", help="OAuth client id (default: from environment)")
    exchange_parser.add_argument("--client-secret", help="OAuth client secret (default: from environment)")
    exchange_parser.add_argument("--redirect-uri", help="Redirect URI (default: OAUTH_REDIRECT_URI)")

    # validate-auth command
    validate_parser = subparsers.add_parser(
        "validate-auth", help="Check a provider credential is present"
    )
    validate_parser.add_argument("--provider", required=True, choices=PROVIDER_CHOICES)
    validate_parser.add_argument("--access-token", help="OAuth access token")
    validate_parser.add_argument("--cookie", help="Cookie string (ESPN)")

    # setup command
    setup_parser = subparsers.add_parser("setup", help="Show provider setup instructions")
    setup_parser.add_argument("--provider", required=True, choices=PROVIDER_CHOICES)

    # sync command
    sync_parser = subparsers.add_parser("sync", help="Sync all of a user's leagues")
    sync_parser.add_argument("--user", required=True, help="Provider user id")
    sync_parser.add_argument(
        "--provider",
        action="append",
        choices=PROVIDER_CHOICES,
        help="Provider to sync (repeatable, default: sleeper)",
    )
    sync_parser.add_argument("--access-token", help="OAuth access token (Yahoo/CBS)")
    sync_parser.add_argument("--cookie", help="Cookie string (ESPN)")
    sync_parser.add_argument(
        "--strict",
        action="store_true",
        help="Report failed league listings as empty instead of a placeholder league",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(get_settings().log_level)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "oauth-url": cmd_oauth_url,
        "exchange-code": cmd_exchange_code,
        "validate-auth": cmd_validate_auth,
        "setup": cmd_setup,
        "sync": cmd_sync,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
