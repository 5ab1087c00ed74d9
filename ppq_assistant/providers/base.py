"""Base provider protocol for chat completion backends."""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class Provider(Protocol):
    """Protocol defining the interface all providers must implement."""

    name: str

    def call(self, model: str, prompt: str) -> str:
        """Send a prompt to the model and return the response text."""
        ...

    def is_available(self) -> bool:
        """Check if this provider can be called (API token set, etc.)."""
        ...


class BaseProvider(ABC):
    """Abstract base class for providers with common functionality."""

    name: str = "base"

    @abstractmethod
    def call(self, model: str, prompt: str) -> str:
        """Send a prompt to the model and return the response text."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider is available."""
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name!r})>"
