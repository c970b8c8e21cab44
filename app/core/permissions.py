from fastapi import Depends, HTTPException, status

from app.core.current_user import get_session
from app.core.deps import get_classroom_client
from app.core.errors import AuthError
from app.core.session import Role, SessionContext
from app.schemas.classroom import UserProfile
from app.services.classroom_client import ClassroomClient


def require_role(*roles: Role):
    allowed = set(roles)

    def checker(session: SessionContext = Depends(get_session)) -> SessionContext:
        if session.role not in allowed:
            names = " or ".join(sorted(r.value for r in allowed))
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{names.capitalize()} role required",
            )
        return session

    return checker


def require_verified_role(*roles: Role):
    """
    Like require_role, but the token must also resolve to a Classroom user.
    Used in front of writes to state the service owns.
    """
    role_checker = require_role(*roles)

    async def checker(
        _: SessionContext = Depends(role_checker),
        client: ClassroomClient = Depends(get_classroom_client),
    ) -> UserProfile:
        try:
            return await client.get_user_profile("me")
        except AuthError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(exc),
                headers={"WWW-Authenticate": "Bearer"},
            )

    return checker
