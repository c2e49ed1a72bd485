from __future__ import annotations

from fastapi import APIRouter

from apps.api.models import TokenResponse

TOKEN_PATH = "/api-security/om-auth/cloud/token"

router = APIRouter(tags=["token"])


@router.post(TOKEN_PATH, response_model=TokenResponse)
async def issue_token() -> TokenResponse:
    """Answer every marketplace token request with the same placeholder token.

    The request is never read, so any body, header or query string gets the
    same response.
    """
    return TokenResponse()
