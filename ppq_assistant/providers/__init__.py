"""Provider implementations for ppq-assistant."""

from .base import BaseProvider, Provider
from .ppq import PPQProvider

__all__ = [
    "Provider",
    "BaseProvider",
    "PPQProvider",
]
