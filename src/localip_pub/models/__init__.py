# src/localip_pub/models/__init__.py
"""SQLAlchemy models for the localip-pub application."""

from .address import NEVER, AddressRecord

__all__ = ["AddressRecord", "NEVER"]
