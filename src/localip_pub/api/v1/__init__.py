# src/localip_pub/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import addresses_router

__all__ = ["addresses_router"]
