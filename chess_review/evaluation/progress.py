"""
Progress reporting for evaluation runs.
"""

import logging
from typing import Callable, Iterable, Optional

from tqdm import tqdm

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class ProgressMonitor:
    """
    Track completion of one evaluation run as a percentage.

    Reported values never decrease, and 100% is only reported once every
    position is settled.
    """

    def __init__(
        self,
        total: int,
        target_depth: int,
        callback: Optional[ProgressCallback] = None,
        show_bar: bool = False,
    ):
        """
        Initialize progress monitor.

        Args:
            total: Number of positions in the run
            target_depth: Depth a local evaluation counts as complete at
            callback: Called with every emitted percentage
            show_bar: Display a tqdm progress bar
        """
        self.total = max(total, 1)
        self.target_depth = target_depth
        self.callback = callback
        self.progress = 0.0

        self._bar = (
            tqdm(total=100.0, desc="Evaluating positions", unit="%", leave=False)
            if show_bar
            else None
        )

    def remote(self, completed: int) -> float:
        """
        Report progress of the cloud pass.

        Args:
            completed: Positions settled so far
        """
        return self._emit(completed / self.total * 100)

    def local(self, completed: int, in_flight_depths: Iterable[int]) -> float:
        """
        Report progress of the local pass.

        Args:
            completed: Positions settled so far
            in_flight_depths: Current search depth of every running evaluation
        """
        cap = self.target_depth - 1
        searched = sum(min(depth, cap) for depth in in_flight_depths)
        done = completed * self.target_depth + searched
        return self._emit(done / (self.total * self.target_depth) * 100)

    def _emit(self, value: float) -> float:
        value = min(max(value, self.progress), 100.0)

        if self._bar is not None:
            self._bar.update(value - self.progress)

        self.progress = value
        logger.info(f"Evaluating positions... ({value:.1f}%)")

        if self.callback is not None:
            self.callback(value)

        return value

    def close(self):
        if self._bar is not None:
            self._bar.close()
            self._bar = None
