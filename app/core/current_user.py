from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.session import Role, SessionContext

bearer_scheme = HTTPBearer(auto_error=False)


def get_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    x_user_role: str | None = Header(default=None),
) -> SessionContext:
    """
    Session for the current request: the Google access token from the
    Authorization header and the role the caller is acting as (X-User-Role).
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-Role header is required",
        )
    try:
        role = Role(x_user_role.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role: {x_user_role}",
        )

    return SessionContext(credentials.credentials, role)
