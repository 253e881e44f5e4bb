"""
Transport module - inbound notification channels keyed by room id.
"""

from __future__ import annotations

from .base import MessageHandler, Transport
from .redis import RedisTransport

__all__ = [
    "Transport",
    "MessageHandler",
    "RedisTransport",
]
