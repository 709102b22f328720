#!/usr/bin/env python3
"""
CLI tool for evaluating every position of a chess game.

Usage:
    python tools/analyse_game.py game.pgn \\
        --depth 16 \\
        --max-workers 8 \\
        --output review.json

    python tools/analyse_game.py game.pgn --no-cloud --timeout 120
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chess_review.config import LICHESS_CLOUD_EVAL_URL, ReviewConfig
from chess_review.errors import ReviewError
from chess_review.pipeline import ReviewPipeline


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def analyse_game(args):
    """Run the review pipeline on one PGN file."""
    pgn_path = Path(args.pgn)
    if not pgn_path.exists():
        print(f"Error: PGN file not found: {pgn_path}")
        sys.exit(1)

    output_path = Path(args.output) if args.output else None
    if output_path and output_path.exists() and not args.overwrite:
        print(f"Error: Output file already exists: {output_path}")
        print("Use --overwrite to replace it")
        sys.exit(1)

    try:
        config = ReviewConfig(
            target_depth=args.depth,
            max_concurrency=args.max_workers,
            max_attempts=args.max_attempts,
            stockfish_path=args.stockfish_path,
            stockfish_threads=args.threads,
            cloud_enabled=not args.no_cloud,
            cloud_url=args.cloud_url,
            timeout=args.timeout,
            show_progress=not args.quiet,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        pipeline = ReviewPipeline(config=config)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        run = pipeline.run(pgn_path.read_text(encoding="utf-8"), fen=args.fen)
    except ReviewError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    report = json.dumps(run.to_dict(), indent=2)

    if output_path:
        output_path.write_text(report)
        print(f"\nEvaluations written to: {output_path}")
    else:
        print(report)

    if run.timed_out or run.unresolved:
        print(f"Warning: {len(run.unresolved)} position(s) left unresolved", file=sys.stderr)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Evaluate every position of a chess game",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("pgn", help="PGN file holding the game")
    parser.add_argument(
        "--fen",
        default=None,
        help="Starting position (default: FEN header or standard start)",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output JSON path (default: print to stdout)",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite existing output file",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=16,
        help="Local engine search depth",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=8,
        help="Maximum concurrent Stockfish instances",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=2,
        help="Local evaluation attempts per position",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=1,
        help="Threads per Stockfish instance",
    )
    parser.add_argument(
        "--stockfish-path",
        default=None,
        help="Path to Stockfish binary (default: auto-detect)",
    )
    parser.add_argument(
        "--no-cloud",
        action="store_true",
        help="Skip Lichess cloud evaluations",
    )
    parser.add_argument(
        "--cloud-url",
        default=LICHESS_CLOUD_EVAL_URL,
        help="Cloud evaluation endpoint",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up after this many seconds (default: no limit)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Hide the progress bar",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    setup_logging(args.verbose)

    analyse_game(args)


if __name__ == "__main__":
    main()
