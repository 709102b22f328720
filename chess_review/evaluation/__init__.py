"""
Evaluation Module

This module fills in engine evaluations for replayed positions. Cloud
lookups are tried first; whatever the cloud cannot answer goes to a bounded
pool of local engine instances.

Key Components:
    - CloudEvaluationClient: Lichess cloud evaluation lookups
    - LocalEngine (ABC): Interface for local engines
    - StockfishEngine: Stockfish over UCI in a subprocess
    - WorkerPool: Bounded concurrent local evaluations with one retry
    - ProgressMonitor: Completion percentage per scheduler tick
    - EvaluationOrchestrator: REMOTE_PASS -> LOCAL_PASS -> DONE

Data Flow:
    [BoardState] → orchestrator.run() → EvaluationRun
                                         top_lines: up to 2 ranked lines
                                         scores from White's perspective
"""

from chess_review.evaluation.base import LocalEngine
from chess_review.evaluation.cloud import (
    UNAVAILABLE,
    CloudEvaluationClient,
    LookupResult,
)
from chess_review.evaluation.orchestrator import EvaluationOrchestrator, Phase
from chess_review.evaluation.progress import ProgressMonitor
from chess_review.evaluation.stockfish import EngineProcessError, StockfishEngine
from chess_review.evaluation.worker_pool import WorkerPool, WorkItem

__all__ = [
    'LocalEngine',
    'CloudEvaluationClient',
    'LookupResult',
    'UNAVAILABLE',
    'EvaluationOrchestrator',
    'Phase',
    'ProgressMonitor',
    'EngineProcessError',
    'StockfishEngine',
    'WorkerPool',
    'WorkItem',
]
