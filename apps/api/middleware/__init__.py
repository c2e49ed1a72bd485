from .errors import register_exception_handlers
from .headers import NoCacheMiddleware
from .logging import LoggingMiddleware
from .read_only import ReadOnlyMiddleware
from .static import StaticFilesMiddleware

__all__ = [
    "register_exception_handlers",
    "NoCacheMiddleware",
    "LoggingMiddleware",
    "ReadOnlyMiddleware",
    "StaticFilesMiddleware",
]
