"""localip-pub: publish a dynamic endpoint behind password-guarded bearer tokens."""

__version__ = "0.1.0"
