from typing import Optional

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    code: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: int = 0
    token_type: str = "Bearer"
    scope: Optional[str] = None


class AuthUrl(BaseModel):
    url: str
