from .authentication import FAKE_ACCESS_TOKEN, FAKE_TOKEN_EXPIRATION, TokenResponse
from .responses import ResourceIndex, ResourceSummary

__all__ = [
    "FAKE_ACCESS_TOKEN",
    "FAKE_TOKEN_EXPIRATION",
    "TokenResponse",
    "ResourceIndex",
    "ResourceSummary",
]
