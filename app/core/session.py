from enum import Enum

from app.core.errors import AuthError


class Role(str, Enum):
    student = "student"
    teacher = "teacher"
    coordinator = "coordinator"


class SessionContext:
    """
    Access token + active role for one caller.

    Built per request and handed to every assembler; there is no module-level
    session. The token is treated as read-only while an assembler runs.
    """

    def __init__(self, access_token: str | None = None, role: Role = Role.student):
        self.access_token: str | None = None
        self.role: Role = Role.student
        if access_token:
            self.init(access_token, role)

    def init(self, access_token: str, role: Role) -> None:
        if not access_token:
            raise AuthError("Access token is required")
        self.access_token = access_token
        self.role = Role(role)

    def clear(self) -> None:
        self.access_token = None
        self.role = Role.student

    @property
    def is_active(self) -> bool:
        return bool(self.access_token)

    def require(self) -> str:
        if not self.access_token:
            raise AuthError("Not authenticated")
        return self.access_token
