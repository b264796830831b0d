from anonymchat.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
