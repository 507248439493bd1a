"""Decide when an infinite-scroll feed has stopped growing."""

import enum
import logging

from .config import DEFAULT_MAX_STALL_COUNT

logger = logging.getLogger(__name__)


class Decision(enum.Enum):
    CONTINUE = "continue"
    STOP = "stop"


class ConvergenceDetector:
    """Bounded-retry stall counter over successive feed height readings.

    A single cycle without growth is not enough to stop, since slow
    rendering can leave the height unchanged for a cycle. ``max_stall_count``
    consecutive stalls are.
    """

    def __init__(self, max_stall_count: int = DEFAULT_MAX_STALL_COUNT, label: str = ""):
        if max_stall_count < 1:
            raise ValueError("max_stall_count must be >= 1")
        self.max_stall_count = max_stall_count
        self.label = label
        self.previous_height = 0
        self.stall_count = 0
        self.stop_reason = None

    def update(self, current_height: int, has_more: bool = True) -> Decision:
        """Feed one cycle's measurement and get the next step.

        ``has_more`` is False when the feed has no "load more" control left;
        that ends the loop regardless of height.
        """
        if not has_more:
            logger.info("no more content term=%s", self.label)
            return self._stop("exhausted")

        if current_height == self.previous_height:
            return self._stall()

        self.stall_count = 0
        self.previous_height = current_height
        return Decision.CONTINUE

    def record_fault(self) -> Decision:
        """Count a failed cycle (UI error, evaluation timeout) as a stall."""
        return self._stall()

    def _stall(self) -> Decision:
        self.stall_count += 1
        logger.info("stall term=%s count=%d/%d", self.label, self.stall_count, self.max_stall_count)
        if self.stall_count >= self.max_stall_count:
            return self._stop("converged")
        return Decision.CONTINUE

    def _stop(self, reason: str) -> Decision:
        self.stop_reason = reason
        return Decision.STOP
