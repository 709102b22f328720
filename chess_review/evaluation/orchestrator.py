"""
Evaluation Orchestrator

Fills in an evaluation for every position of a replayed game using the
cloud evaluation cache first and a bounded pool of local engines after.

Phases:
    REMOTE_PASS    Cloud lookups one at a time, in position order, from
                   index 1. The first lookup that does not return exactly two
                   lines ends the pass for the whole game.
    LOCAL_PASS     Every tick: assign idle engine slots, report progress,
                   stop once every position is settled.
    DONE           No further mutation of the positions.

Threading:
    The orchestrator runs on the caller's thread and never evaluates itself.
    It sleeps on the worker pool's completion queue between ticks instead of
    polling a flag.
"""

import logging
import time
from enum import Enum
from typing import List, Optional

from chess_review.data.positions import (
    BoardState,
    Evaluation,
    EvaluationRun,
    EvaluationSource,
)
from chess_review.evaluation.cloud import CloudEvaluationClient
from chess_review.evaluation.progress import ProgressMonitor
from chess_review.evaluation.worker_pool import WorkerPool

logger = logging.getLogger(__name__)


class Phase(Enum):
    REMOTE_PASS = "remote_pass"
    LOCAL_PASS = "local_pass"
    DONE = "done"


class EvaluationOrchestrator:
    """Drive one evaluation run from REMOTE_PASS to DONE."""

    def __init__(
        self,
        worker_pool: WorkerPool,
        cloud_client: Optional[CloudEvaluationClient] = None,
        progress: Optional[ProgressMonitor] = None,
        tick_interval: float = 0.1,
        timeout: Optional[float] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            worker_pool: Pool running local evaluations (shut down by run())
            cloud_client: Cloud lookup client (None = skip the remote pass)
            progress: Progress monitor for this run
            tick_interval: Seconds between local pass ticks
            timeout: Budget for the whole run in seconds (None = no limit)
        """
        self.worker_pool = worker_pool
        self.cloud_client = cloud_client
        self.progress = progress
        self.tick_interval = tick_interval
        self.timeout = timeout
        self.phase = Phase.REMOTE_PASS

    def run(self, states: List[BoardState]) -> EvaluationRun:
        """
        Evaluate every position in place.

        Blocks until every position has candidate lines or is marked
        unresolved.

        Args:
            states: Positions from replay, starting position first

        Returns:
            EvaluationRun over the same list
        """
        deadline = time.monotonic() + self.timeout if self.timeout else None
        timed_out = False

        try:
            if self.cloud_client is not None:
                self.phase = Phase.REMOTE_PASS
                self._remote_pass(states, deadline)

            self.phase = Phase.LOCAL_PASS
            timed_out = self._local_pass(states, deadline)
        finally:
            self.worker_pool.shutdown()
            if self.progress is not None:
                self.progress.close()
            self.phase = Phase.DONE

        if timed_out:
            logger.warning(
                f"Evaluation timed out after {self.timeout}s, "
                f"{sum(1 for s in states if s.is_unresolved)} position(s) unresolved"
            )
        else:
            logger.info(f"Evaluated {len(states)} positions")

        return EvaluationRun(positions=states, timed_out=timed_out)

    def _remote_pass(self, states: List[BoardState], deadline: Optional[float]):
        logger.info("Fetching cloud evaluations")

        for index in range(1, len(states)):
            if deadline is not None and time.monotonic() >= deadline:
                return

            state = states[index]
            result = self.cloud_client.lookup(
                state.fen, depth=self.worker_pool.target_depth
            )

            if not result.is_authoritative:
                self._place_cutoff(states, index)
                logger.info(
                    f"Cloud evaluation unavailable at position {index}, "
                    f"evaluating the remaining {len(states) - index} locally"
                )
                return

            state.set_lines(result.lines, EvaluationSource.CLOUD)
            if self.progress is not None:
                self.progress.remote(self._settled_count(states))

    def _place_cutoff(self, states: List[BoardState], index: int):
        """Give the position before the first cloud miss a fallback evaluation."""
        previous = states[index - 1]
        previous.cutoff_evaluation = previous.best_evaluation() or Evaluation.neutral()

    def _local_pass(self, states: List[BoardState], deadline: Optional[float]) -> bool:
        """
        Run ticks until every position is settled.

        Returns:
            True if the deadline passed first
        """
        logger.info("Evaluating remaining positions with local engines")

        while True:
            if deadline is not None and time.monotonic() >= deadline:
                if not all(state.is_settled for state in states):
                    self._abandon(states)
                    return True

            self.worker_pool.try_assign(states)

            if self.progress is not None:
                self.progress.local(
                    self._settled_count(states),
                    self.worker_pool.in_flight_depths().values(),
                )

            if all(state.is_settled for state in states):
                return False

            wait = self.tick_interval
            if deadline is not None:
                wait = max(min(wait, deadline - time.monotonic()), 0.0)

            self.worker_pool.wait_for_completions(states, timeout=wait)

    def _abandon(self, states: List[BoardState]):
        self.worker_pool.shutdown()
        for state in states:
            state.mark_unresolved()

    @staticmethod
    def _settled_count(states: List[BoardState]) -> int:
        return sum(1 for state in states if state.is_settled)
