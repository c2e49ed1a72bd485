from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

FAKE_ACCESS_TOKEN = "fakeString"
# 2050-01-01T00:00:00Z
FAKE_TOKEN_EXPIRATION = 2524604400


class TokenResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str = Field(default=FAKE_ACCESS_TOKEN, description="Placeholder bearer token")
    expiration: int = Field(default=FAKE_TOKEN_EXPIRATION, description="Expiration as unix epoch seconds")
