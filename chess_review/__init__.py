"""
Chess Review

Turns a recorded chess game into per-position engine evaluations, ready for
move classification and report generation.

## Architecture

The package is organized into several key modules:

1. **data**: Game records and position records
   - PGN parsing into SAN move tokens
   - BoardState / EvaluationLine data model

2. **board**: Board replay
   - Replay SAN tokens on a python-chess board, one BoardState per ply
   - Fails fast on the first illegal move

3. **evaluation**: Evaluation acquisition
   - Lichess cloud evaluation client
   - Stockfish UCI driver and a bounded worker pool of instances
   - Orchestrator: cloud pass, then local pass, with progress reporting

4. **pipeline**: End-to-end review
   - parse -> replay -> acquire evaluations -> report generator

## Quick Start

```python
from chess_review import ReviewConfig, ReviewPipeline

pipeline = ReviewPipeline(ReviewConfig(target_depth=14, max_concurrency=4))
run = pipeline.acquire_evaluations(None, ["e4", "e5", "Nf3"])

for state in run.positions:
    print(state.move, state.best_evaluation())
```

From the command line:

```bash
python tools/analyse_game.py game.pgn --depth 14 --output review.json
```

## Version

0.1.0
"""

__version__ = "0.1.0"
__license__ = "MIT"

from chess_review.config import ReviewConfig
from chess_review.errors import (
    InvalidMove,
    InvalidStartingPosition,
    MalformedRecord,
    ReviewError,
)
from chess_review.pipeline import ReviewPipeline, acquire_evaluations

__all__ = [
    'ReviewConfig',
    'ReviewError',
    'MalformedRecord',
    'InvalidMove',
    'InvalidStartingPosition',
    'ReviewPipeline',
    'acquire_evaluations',
]
