"""Middleware for aiogram."""

from tokenfeed.middleware.error_handler import ErrorHandlerMiddleware
from tokenfeed.middleware.logging import LoggingMiddleware

__all__ = ["ErrorHandlerMiddleware", "LoggingMiddleware"]
