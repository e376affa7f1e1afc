"""Telegram handlers."""

from tokenfeed.handlers.router import setup_routers

__all__ = ["setup_routers"]
