"""Event publisher adapters."""

from .console import ConsoleEventPublisher

__all__ = ["ConsoleEventPublisher"]
