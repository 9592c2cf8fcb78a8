"""Clock adapters."""

from .system import SystemClock

__all__ = ["SystemClock"]
