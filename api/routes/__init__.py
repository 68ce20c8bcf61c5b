"""API routes package"""

from . import health, stream

__all__ = ["health", "stream"]
