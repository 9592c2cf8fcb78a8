"""
Console event publisher adapter - Implements EventPublisher protocol.

This module provides a console-based implementation of the domain's
event publisher port, logging registry events for audit and demo purposes.
"""

import logging
from typing import Any

from credochain.domain.ports import RegistryEvent

logger = logging.getLogger(__name__)


class ConsoleEventPublisher:
    """
    Implements EventPublisher protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def publish(self, event: RegistryEvent, payload: dict[str, Any]) -> None:
        """
        Log a registry event at INFO level.

        Fields are rendered as sorted key=value pairs so the log line is
        stable across runs and easy to grep.

        Args:
            event: Event kind
            payload: Event fields
        """
        fields = " ".join(f"{key}={payload[key]}" for key in sorted(payload))
        logger.info("[EVENT] %s %s", event.value, fields)
