from .token import router as token_router
from .resources import router as resources_router

__all__ = ["token_router", "resources_router"]
