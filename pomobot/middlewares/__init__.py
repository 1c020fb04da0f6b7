from .logging import CommandLoggingMiddleware

__all__ = [
    "CommandLoggingMiddleware",
]
