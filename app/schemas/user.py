from pydantic import BaseModel, EmailStr

from app.core.session import Role


class UserInfo(BaseModel):
    id: str
    email: EmailStr | None = None
    name: str | None = None
    picture: str | None = None


class UserRead(UserInfo):
    role: Role
