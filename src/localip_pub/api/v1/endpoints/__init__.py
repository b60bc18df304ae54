# src/localip_pub/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .addresses import router as addresses_router

__all__ = ["addresses_router"]
