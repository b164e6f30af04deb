"""
Authentication models: identity provider results, token info and status events.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthenticationResult(BaseModel):
    """Token returned by an identity provider."""
    access_token: str = Field(alias="accessToken")
    expires_on: Optional[datetime] = Field(None, alias="expiresOn")
    account: Optional[dict[str, Any]] = None

    model_config = ConfigDict(populate_by_name=True)


class CachedToken(BaseModel):
    access_token: str
    expires_at: Optional[datetime] = None

    def is_valid(self, now: datetime) -> bool:
        return self.expires_at is not None and now < self.expires_at


class TokenInfo(BaseModel):
    has_token: bool = Field(alias="hasToken")
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")
    is_valid: bool = Field(alias="isValid")

    model_config = ConfigDict(populate_by_name=True)


class AuthErrorInfo(BaseModel):
    name: str
    message: str
    code: str
    timestamp: datetime


class AuthStatus(BaseModel):
    is_authenticated: bool = Field(alias="isAuthenticated")
    error: Optional[AuthErrorInfo] = None
    token_info: Optional[TokenInfo] = Field(None, alias="tokenInfo")

    model_config = ConfigDict(populate_by_name=True)
