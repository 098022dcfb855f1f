"""
OAuth 2.0 helpers for the providers that use it (Yahoo, CBS).

Provides:
- Authorization URL construction (pure, no network)
- Authorization-code and refresh-token grants against the token endpoint
- Credential pre-checks and per-provider setup instructions

Cookie-based (ESPN) and anonymous (Sleeper) providers are rejected with
UnsupportedOperationError before any network activity.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional
from urllib.parse import quote, urlencode

import httpx
from pydantic import ValidationError

from .core.config import get_settings
from .core.errors import TokenExchangeError, UnsupportedOperationError
from .core.models import AuthValidation, SetupInstructions, TokenResponse
from .core.types import AuthStyle, Provider, ProviderConfig, get_provider_config, to_provider

logger = logging.getLogger(__name__)


def _oauth_config(provider: str | Provider) -> ProviderConfig:
    config = get_provider_config(provider)
    if not config.supports_oauth:
        raise UnsupportedOperationError(
            f"{config.display_name} does not support OAuth", provider=config.name
        )
    return config


# =============================================================================
# Authorization URL
# =============================================================================


def build_authorization_url(
    provider: str | Provider,
    client_id: str,
    redirect_uri: str,
    state: Optional[str] = None,
) -> str:
    """
    Build the URL that sends a user to the provider's consent screen.

    Raises:
        UnsupportedOperationError: If the provider does not use OAuth
    """
    config = _oauth_config(provider)
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(config.scopes),
    }
    if state:
        params["state"] = state
    return f"{config.auth_url}?{urlencode(params, quote_via=quote)}"


# Alias
generate_oauth_url = build_authorization_url


# =============================================================================
# Token endpoint
# =============================================================================


async def _token_request(
    config: ProviderConfig,
    data: dict[str, str],
    timeout: Optional[float],
    transport: Optional[httpx.AsyncBaseTransport],
) -> TokenResponse:
    deadline = timeout or get_settings().request_timeout

    try:
        async with httpx.AsyncClient(timeout=deadline, transport=transport) as client:
            response = await asyncio.wait_for(
                client.post(
                    config.token_url,
                    data=data,
                    headers={"Accept": "application/json"},
                ),
                timeout=deadline,
            )
    except (httpx.RequestError, asyncio.TimeoutError) as e:
        raise TokenExchangeError(
            f"{config.display_name} token request failed: {e!r}", provider=config.name
        ) from e

    if not response.is_success:
        raise TokenExchangeError(
            f"{config.display_name} token exchange failed: HTTP {response.status_code}: "
            f"{response.text[:200]}",
            provider=config.name,
            status_code=response.status_code,
        )

    try:
        body = response.json()
    except ValueError as e:
        raise TokenExchangeError(
            f"{config.display_name} token endpoint returned invalid JSON",
            provider=config.name,
            status_code=response.status_code,
        ) from e

    if not isinstance(body, dict) or not body.get("access_token"):
        raise TokenExchangeError(
            f"{config.display_name} token response missing access_token",
            provider=config.name,
            status_code=response.status_code,
        )

    try:
        return TokenResponse.model_validate(body)
    except ValidationError as e:
        raise TokenExchangeError(
            f"{config.display_name} token response malformed: {e.error_count()} validation error(s)",
            provider=config.name,
            status_code=response.status_code,
        ) from e


async def exchange_code_for_token(
    provider: str | Provider,
    code: str,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    *,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TokenResponse:
    """
    Exchange an authorization code for tokens.

    Args:
        provider: OAuth provider (yahoo or cbs)
        code: Code from the redirect back to ``redirect_uri``
        client_id: OAuth application id
        client_secret: OAuth application secret
        redirect_uri: Must match the one used to build the authorization URL
        timeout: Request deadline in seconds (default: settings.request_timeout)
        transport: Optional httpx transport (tests)

    Returns:
        TokenResponse with access_token and, when issued, refresh_token/expires_in

    Raises:
        UnsupportedOperationError: If the provider does not use OAuth
        TokenExchangeError: On non-2xx, network failure, timeout or a body
            without access_token
    """
    config = _oauth_config(provider)
    token = await _token_request(
        config,
        {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": redirect_uri,
        },
        timeout,
        transport,
    )
    logger.info(f"Exchanged authorization code for {config.name} token")
    return token


async def refresh_access_token(
    provider: str | Provider,
    refresh_token: str,
    client_id: str,
    client_secret: str,
    *,
    redirect_uri: Optional[str] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TokenResponse:
    """Trade a refresh token for a new access token (same errors as the code exchange)."""
    config = _oauth_config(provider)
    data = {
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
        "client_id": client_id,
        "client_secret": client_secret,
    }
    # Yahoo requires the redirect_uri on refresh as well
    if redirect_uri:
        data["redirect_uri"] = redirect_uri
    token = await _token_request(config, data, timeout, transport)
    logger.info(f"Refreshed {config.name} access token")
    return token


# =============================================================================
# Credential checks & setup
# =============================================================================


def validate_provider_auth(
    provider: str | Provider,
    access_token: Optional[str] = None,
    cookie_string: Optional[str] = None,
) -> AuthValidation:
    """Check that the credential a provider needs has been supplied."""
    try:
        config = get_provider_config(provider)
    except UnsupportedOperationError:
        return AuthValidation(valid=False, error=f"Unsupported provider: {provider}")

    if config.auth_style is AuthStyle.oauth2 and not access_token:
        return AuthValidation(valid=False, error=f"{config.display_name} requires OAuth access token")
    if config.auth_style is AuthStyle.cookie and not cookie_string:
        return AuthValidation(
            valid=False, error="ESPN requires authentication cookies for private leagues"
        )
    return AuthValidation(valid=True)


SETUP_INSTRUCTIONS: dict[Provider, SetupInstructions] = {
    Provider.yahoo: SetupInstructions(
        title="Yahoo Fantasy Setup",
        steps=[
            "Create a Yahoo Developer App at developer.yahoo.com",
            "Configure OAuth redirect URI in your app settings",
            "Use the OAuth flow to get user consent",
            "Exchange authorization code for access token",
            "Store access token securely for API calls",
        ],
        auth_type="oauth",
        difficulty="medium",
    ),
    Provider.espn: SetupInstructions(
        title="ESPN Fantasy Setup",
        steps=[
            "User must be logged into ESPN Fantasy",
            "For private leagues, extract the espn_s2 and SWID cookies",
            "Include cookies in API requests",
            "Note: ESPN cookies expire periodically",
        ],
        auth_type="cookies",
        difficulty="hard",
    ),
    Provider.cbs: SetupInstructions(
        title="CBS Sports Fantasy Setup",
        steps=[
            "Register for CBS Sports API access",
            "Implement OAuth 2.0 flow",
            "Handle token refresh automatically",
            "Store tokens securely",
        ],
        auth_type="oauth",
        difficulty="medium",
    ),
    Provider.sleeper: SetupInstructions(
        title="Sleeper Fantasy Setup",
        steps=[
            "No authentication required!",
            "Use public API with username/user_id",
            "Start making API calls immediately",
        ],
        auth_type="none",
        difficulty="easy",
    ),
}


def get_provider_setup_instructions(provider: str | Provider) -> SetupInstructions:
    """
    Raises:
        UnsupportedOperationError: If the provider is not in the registry
    """
    return SETUP_INSTRUCTIONS[to_provider(provider)].model_copy(deep=True)
