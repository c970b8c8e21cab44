"""
Stateless Google OAuth helpers.

Nothing here holds tokens between calls: credentials go in as arguments and
new credentials come back as return values.
"""
import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

from app.core import config
from app.core.errors import AuthError
from app.schemas.auth import TokenResponse
from app.schemas.user import UserInfo

logger = logging.getLogger(__name__)


def authorization_url(state: Optional[str] = None) -> str:
    query = {
        "client_id": config.GOOGLE_CLIENT_ID,
        "redirect_uri": config.GOOGLE_REDIRECT_URI,
        "scope": " ".join(config.OAUTH_SCOPES),
        "response_type": "code",
        "access_type": "offline",
        "prompt": "consent",
    }
    if state:
        query["state"] = state
    return f"{config.GOOGLE_AUTH_URL}?{urlencode(query)}"


def _require_client_config() -> None:
    if not config.GOOGLE_CLIENT_ID or not config.GOOGLE_CLIENT_SECRET:
        logger.error(
            "Google OAuth is not configured (client id set: %s, secret set: %s)",
            bool(config.GOOGLE_CLIENT_ID),
            bool(config.GOOGLE_CLIENT_SECRET),
        )
        raise AuthError("Server configuration error", status=500)


async def _post_token(payload: dict, transport: Optional[httpx.AsyncBaseTransport]) -> TokenResponse:
    async with httpx.AsyncClient(timeout=config.REQUEST_TIMEOUT_SECONDS, transport=transport) as client:
        try:
            response = await client.post(config.GOOGLE_TOKEN_URL, data=payload)
        except httpx.HTTPError as exc:
            raise AuthError(f"Token endpoint unreachable: {exc}", status=502) from exc

    try:
        body = response.json()
    except ValueError:
        body = {}

    if response.status_code >= 300:
        message = body.get("error_description") or body.get("error") or "Token exchange failed"
        logger.warning("Google token endpoint returned %s: %s", response.status_code, message)
        raise AuthError(f"Token exchange failed: {response.status_code} - {message}", status=response.status_code)
    if not body.get("access_token"):
        raise AuthError("Token exchange failed: no access token in response", status=502)

    return TokenResponse.model_validate(body)


async def exchange_code(
    code: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TokenResponse:
    if not code:
        raise AuthError("Authorization code is required", status=400)
    _require_client_config()

    logger.info("Exchanging authorization code (redirect_uri=%s)", config.GOOGLE_REDIRECT_URI)
    return await _post_token(
        {
            "code": code,
            "client_id": config.GOOGLE_CLIENT_ID,
            "client_secret": config.GOOGLE_CLIENT_SECRET,
            "redirect_uri": config.GOOGLE_REDIRECT_URI,
            "grant_type": "authorization_code",
        },
        transport,
    )


async def refresh_access_token(
    refresh_token: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TokenResponse:
    if not refresh_token:
        raise AuthError("No refresh token available", status=400)
    _require_client_config()

    tokens = await _post_token(
        {
            "refresh_token": refresh_token,
            "client_id": config.GOOGLE_CLIENT_ID,
            "client_secret": config.GOOGLE_CLIENT_SECRET,
            "grant_type": "refresh_token",
        },
        transport,
    )
    # Google omits the refresh token on refresh; keep the one we were given
    if not tokens.refresh_token:
        tokens.refresh_token = refresh_token
    return tokens


async def fetch_user_info(
    access_token: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UserInfo:
    if not access_token:
        raise AuthError("Access token is required")

    async with httpx.AsyncClient(timeout=config.REQUEST_TIMEOUT_SECONDS, transport=transport) as client:
        try:
            response = await client.get(
                config.GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            raise AuthError(f"User info endpoint unreachable: {exc}") from exc

    if response.status_code != 200:
        raise AuthError("Failed to get user info")
    return UserInfo.model_validate(response.json())
