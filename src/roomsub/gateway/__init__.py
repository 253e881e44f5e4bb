"""
Gateway module - request/response channel to the notification backend.
"""

from __future__ import annotations

from .base import QueryGateway
from .http import HttpQueryGateway

__all__ = [
    "QueryGateway",
    "HttpQueryGateway",
]
