"""System clock adapter - Implements Clock protocol with wall-clock time."""

import time


class SystemClock:
    """Unix wall clock, truncated to whole seconds."""

    def now(self) -> int:
        return int(time.time())
