"""
Bounded pool of local engine instances.

Threading:
    - Coordinator thread: calls try_assign() and wait_for_completions()
    - Worker threads: one per active WorkItem, each blocked in evaluate()
    - Communication: a completion queue; workers never touch BoardState
"""

import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from chess_review.data.positions import BoardState, EvaluationLine, EvaluationSource
from chess_review.evaluation.base import LocalEngine

logger = logging.getLogger(__name__)

EngineFactory = Callable[[], LocalEngine]


@dataclass
class WorkItem:
    """An in-flight local evaluation of the position at `index`."""

    index: int
    engine: LocalEngine
    attempt: int
    future: Optional[Future] = None


@dataclass
class Completion:
    """Result message posted by a worker thread."""

    index: int
    lines: Optional[List[EvaluationLine]] = None
    error: Optional[BaseException] = None


class WorkerPool:
    """
    Run local evaluations with at most max_concurrency in flight.

    Each position gets at most max_attempts evaluations. A position whose
    attempts all fail is marked unresolved instead of being retried forever.
    """

    def __init__(
        self,
        engine_factory: EngineFactory,
        max_concurrency: int = 8,
        target_depth: int = 16,
        max_attempts: int = 2,
    ):
        """
        Initialize worker pool.

        Args:
            engine_factory: Creates a fresh engine instance per work item
            max_concurrency: Maximum simultaneous work items
            target_depth: Search depth for every evaluation
            max_attempts: Evaluations per position before giving up
        """
        self.engine_factory = engine_factory
        self.max_concurrency = max_concurrency
        self.target_depth = target_depth
        self.max_attempts = max_attempts

        self._executor = ThreadPoolExecutor(
            max_workers=max_concurrency, thread_name_prefix="local-engine"
        )
        self._completions: "queue.Queue[Completion]" = queue.Queue()
        self._work_items: Dict[int, WorkItem] = {}
        self._attempts: Dict[int, int] = {}
        self._lock = threading.Lock()
        self._closed = False

    @property
    def active_count(self) -> int:
        """Number of work items currently in flight."""
        with self._lock:
            return len(self._work_items)

    def is_active(self, index: int) -> bool:
        with self._lock:
            return index in self._work_items

    def in_flight_depths(self) -> Dict[int, int]:
        """Current search depth of each in-flight work item, by state index."""
        with self._lock:
            items = list(self._work_items.values())
        return {item.index: item.engine.depth for item in items}

    def try_assign(self, states: Sequence[BoardState]) -> int:
        """
        Start evaluations for unclaimed positions, lowest index first.

        Returns immediately; results arrive through wait_for_completions().

        Args:
            states: Full position sequence

        Returns:
            Number of work items started
        """
        if self._closed:
            return 0

        started = 0
        for index, state in enumerate(states):
            if state.is_settled:
                continue

            with self._lock:
                if len(self._work_items) >= self.max_concurrency:
                    break
                if index in self._work_items:
                    continue

                attempt = self._attempts.get(index, 0) + 1
                self._attempts[index] = attempt
                item = WorkItem(index=index, engine=self.engine_factory(), attempt=attempt)
                self._work_items[index] = item

            item.future = self._executor.submit(item.engine.evaluate, state.fen, self.target_depth)
            item.future.add_done_callback(
                lambda future, index=index: self._post_completion(index, future)
            )
            started += 1
            logger.debug(f"Assigned position {index} (attempt {attempt})")

        return started

    def _post_completion(self, index: int, future: Future):
        if future.cancelled():
            self._completions.put(Completion(index=index, error=RuntimeError("cancelled")))
            return

        error = future.exception()
        if error is not None:
            self._completions.put(Completion(index=index, error=error))
        else:
            self._completions.put(Completion(index=index, lines=future.result()))

    def wait_for_completions(
        self, states: Sequence[BoardState], timeout: Optional[float] = None
    ) -> int:
        """
        Block until a completion arrives or timeout passes, then apply every
        completion that is ready.

        Args:
            states: Full position sequence the completions refer to
            timeout: Maximum seconds to wait for the first completion

        Returns:
            Number of completions applied
        """
        try:
            completion = self._completions.get(timeout=timeout)
        except queue.Empty:
            return 0

        applied = 0
        while True:
            self._apply(states, completion)
            applied += 1
            try:
                completion = self._completions.get_nowait()
            except queue.Empty:
                return applied

    def _apply(self, states: Sequence[BoardState], completion: Completion):
        with self._lock:
            item = self._work_items.pop(completion.index, None)
        if item is None:
            return

        state = states[completion.index]

        if completion.error is None:
            state.set_lines(completion.lines or [], EvaluationSource.LOCAL)
            logger.debug(f"Position {completion.index} evaluated locally")
            return

        if item.attempt >= self.max_attempts:
            logger.warning(
                f"Local evaluation of position {completion.index} failed "
                f"{item.attempt} time(s), marking unresolved: {completion.error}"
            )
            state.mark_unresolved()
        else:
            logger.warning(
                f"Local evaluation of position {completion.index} failed, "
                f"will retry: {completion.error}"
            )

    def shutdown(self):
        """Stop all in-flight engines and release the worker threads."""
        self._closed = True
        with self._lock:
            items = list(self._work_items.values())
            self._work_items.clear()

        for item in items:
            if item.future is not None:
                item.future.cancel()
            item.engine.stop()

        if items:
            logger.info(f"Stopped {len(items)} in-flight local evaluation(s)")

        self._executor.shutdown(wait=False, cancel_futures=True)
