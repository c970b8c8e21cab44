from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.current_user import get_session
from app.core.deps import get_oauth_transport
from app.core.errors import AuthError
from app.core.session import SessionContext
from app.schemas.auth import AuthUrl, RefreshRequest, TokenRequest, TokenResponse
from app.schemas.user import UserRead
from app.services import oauth

router = APIRouter()


@router.get("/url", response_model=AuthUrl)
def auth_url(state: Optional[str] = None):
    return {"url": oauth.authorization_url(state)}


@router.post(
    "/token",
    response_model=TokenResponse,
    responses={
        400: {"description": "Code exchange failed"},
        500: {"description": "OAuth client is not configured"},
        502: {"description": "Token endpoint unreachable"},
    },
)
async def token(payload: TokenRequest, transport=Depends(get_oauth_transport)):
    try:
        return await oauth.exchange_code(payload.code, transport=transport)
    except AuthError as exc:
        raise HTTPException(status_code=exc.status or status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post(
    "/refresh",
    response_model=TokenResponse,
    responses={
        400: {"description": "Refresh token rejected"},
    },
)
async def refresh(payload: RefreshRequest, transport=Depends(get_oauth_transport)):
    try:
        return await oauth.refresh_access_token(payload.refresh_token, transport=transport)
    except AuthError as exc:
        raise HTTPException(status_code=exc.status or status.HTTP_401_UNAUTHORIZED, detail=str(exc))


@router.get("/me", response_model=UserRead)
async def me(
    session: SessionContext = Depends(get_session),
    transport=Depends(get_oauth_transport),
):
    try:
        info = await oauth.fetch_user_info(session.require(), transport=transport)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    return UserRead(**info.model_dump(), role=session.role)
