"""
End-to-end review pipeline.

Orchestrates PGN parsing, board replay, evaluation acquisition and the
hand-off to the report generator.
"""

import logging
from typing import Any, Callable, List, Optional, Sequence

from chess_review.board.replay import replay
from chess_review.config import ReviewConfig
from chess_review.data.pgn_parser import PGNParser
from chess_review.data.positions import BoardState, EvaluationRun
from chess_review.evaluation.cloud import CloudEvaluationClient
from chess_review.evaluation.orchestrator import EvaluationOrchestrator
from chess_review.evaluation.progress import ProgressCallback, ProgressMonitor
from chess_review.evaluation.stockfish import StockfishEngine, find_stockfish
from chess_review.evaluation.worker_pool import EngineFactory, WorkerPool

logger = logging.getLogger(__name__)

ReportGenerator = Callable[[List[BoardState]], Any]


class ReviewPipeline:
    """Turn a game record into evaluated positions for the report stage."""

    def __init__(
        self,
        config: Optional[ReviewConfig] = None,
        report_generator: Optional[ReportGenerator] = None,
        cloud_client: Optional[CloudEvaluationClient] = None,
        engine_factory: Optional[EngineFactory] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize review pipeline.

        Args:
            config: Pipeline configuration (uses defaults if None)
            report_generator: Receives the evaluated positions in run()
            cloud_client: Cloud lookup client (built from config if None)
            engine_factory: Creates local engines (Stockfish if None)
            progress_callback: Called with each progress percentage

        Raises:
            FileNotFoundError: If no engine factory is given and Stockfish
                cannot be found
        """
        self.config = config or ReviewConfig()
        self.report_generator = report_generator
        self.progress_callback = progress_callback
        self.parser = PGNParser()

        if cloud_client is None and self.config.cloud_enabled:
            cloud_client = CloudEvaluationClient(
                depth=self.config.target_depth,
                url=self.config.cloud_url,
                timeout=self.config.cloud_timeout,
            )
        self.cloud_client = cloud_client if self.config.cloud_enabled else None

        if engine_factory is None:
            engine_factory = self._stockfish_factory()
        self.engine_factory = engine_factory

        logger.info(
            f"Initialized review pipeline (depth={self.config.target_depth}, "
            f"workers={self.config.max_concurrency}, "
            f"cloud={'on' if self.cloud_client else 'off'})"
        )

    def _stockfish_factory(self) -> EngineFactory:
        stockfish_path = self.config.stockfish_path or find_stockfish()
        threads = self.config.stockfish_threads

        def factory() -> StockfishEngine:
            return StockfishEngine(stockfish_path=stockfish_path, threads=threads)

        # Fail at construction rather than on the first assignment
        factory()
        return factory

    def parse(self, pgn: str, fen: Optional[str] = None) -> List[BoardState]:
        """
        Parse and replay a game record.

        Args:
            pgn: Game record in PGN format
            fen: Starting position (defaults to the record's FEN header, then
                the standard start)

        Returns:
            One unevaluated BoardState per ply, plus the starting position

        Raises:
            MalformedRecord: If the PGN cannot be parsed
            InvalidStartingPosition: If the starting FEN is invalid
            InvalidMove: If the game contains an illegal move
        """
        game = self.parser.parse(pgn)
        return replay(fen or game.starting_fen, game.moves)

    def acquire_evaluations(
        self,
        starting_fen: Optional[str],
        move_tokens: Sequence[str],
        target_depth: Optional[int] = None,
    ) -> EvaluationRun:
        """
        Replay moves and evaluate every resulting position.

        Args:
            starting_fen: Starting position (None = standard start)
            move_tokens: SAN moves in play order
            target_depth: Local search depth (defaults to config.target_depth)

        Returns:
            EvaluationRun with every position evaluated or marked unresolved

        Raises:
            InvalidStartingPosition: If the starting FEN is invalid
            InvalidMove: If a move is illegal; no evaluation work is done
        """
        states = replay(starting_fen, move_tokens)
        return self.evaluate(states, target_depth=target_depth)

    def evaluate(
        self, states: List[BoardState], target_depth: Optional[int] = None
    ) -> EvaluationRun:
        """
        Evaluate already replayed positions in place.

        Args:
            states: Positions from replay
            target_depth: Local search depth (defaults to config.target_depth)

        Returns:
            EvaluationRun over states
        """
        depth = target_depth or self.config.target_depth

        worker_pool = WorkerPool(
            engine_factory=self.engine_factory,
            max_concurrency=self.config.max_concurrency,
            target_depth=depth,
            max_attempts=self.config.max_attempts,
        )
        progress = ProgressMonitor(
            total=len(states),
            target_depth=depth,
            callback=self.progress_callback,
            show_bar=self.config.show_progress,
        )
        orchestrator = EvaluationOrchestrator(
            worker_pool=worker_pool,
            cloud_client=self.cloud_client,
            progress=progress,
            tick_interval=self.config.tick_interval,
            timeout=self.config.timeout,
        )

        logger.info(f"Evaluating {len(states)} positions at depth {depth}")
        return orchestrator.run(states)

    def run(self, pgn: str, fen: Optional[str] = None) -> Any:
        """
        Execute the complete review.

        Args:
            pgn: Game record in PGN format
            fen: Starting position override

        Returns:
            The report generator's result, or the EvaluationRun when no
            report generator is configured

        Raises:
            ReviewError: If the record is rejected
            RuntimeError: If the report generator fails
        """
        states = self.parse(pgn, fen)
        evaluation = self.evaluate(states)

        if self.report_generator is None:
            return evaluation

        try:
            return self.report_generator(evaluation.positions)
        except Exception as e:
            logger.error(f"Report generation failed: {e}")
            raise RuntimeError("Failed to generate report") from e


def acquire_evaluations(
    starting_fen: Optional[str],
    move_tokens: Sequence[str],
    target_depth: Optional[int] = None,
    config: Optional[ReviewConfig] = None,
    **pipeline_kwargs,
) -> EvaluationRun:
    """
    Evaluate every position of a game with a one-off pipeline.

    Args:
        starting_fen: Starting position (None = standard start)
        move_tokens: SAN moves in play order
        target_depth: Local search depth (defaults to config.target_depth)
        config: Pipeline configuration (uses defaults if None)
        **pipeline_kwargs: Passed to ReviewPipeline

    Returns:
        EvaluationRun with every position evaluated or marked unresolved
    """
    pipeline = ReviewPipeline(config=config, **pipeline_kwargs)
    return pipeline.acquire_evaluations(starting_fen, move_tokens, target_depth)
