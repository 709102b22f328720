"""
Stockfish integration for evaluating positions locally.

Runs a Stockfish binary over UCI with two principal variations and reports
ranked candidate lines, exposing the current search depth while it runs.
"""

import logging
import shutil
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from chess_review.data.positions import CENTIPAWN, MATE, Evaluation, EvaluationLine
from chess_review.evaluation.base import LocalEngine

logger = logging.getLogger(__name__)


class EngineProcessError(RuntimeError):
    """The engine process failed before reporting a best move."""


@dataclass
class InfoLine:
    """A parsed UCI 'info' line carrying a scored principal variation."""

    depth: int
    multipv: int
    score_type: str  # "cp" or "mate", side to move POV
    score: int
    move_uci: str


def parse_info_line(line: str) -> Optional[InfoLine]:
    """
    Parse a UCI info line.

    Args:
        line: Raw engine output line

    Returns:
        InfoLine, or None if the line has no score or no principal variation
    """
    parts = line.split()
    if not parts or parts[0] != "info":
        return None
    if "score" not in parts or "pv" not in parts or "depth" not in parts:
        return None

    try:
        depth = int(parts[parts.index("depth") + 1])
        multipv = int(parts[parts.index("multipv") + 1]) if "multipv" in parts else 1

        score_idx = parts.index("score") + 1
        score_type = parts[score_idx]
        score = int(parts[score_idx + 1])

        move_uci = parts[parts.index("pv") + 1]
    except (ValueError, IndexError):
        return None

    if score_type not in (CENTIPAWN, MATE):
        return None

    return InfoLine(
        depth=depth,
        multipv=multipv,
        score_type=score_type,
        score=score,
        move_uci=move_uci,
    )


def find_stockfish() -> str:
    """
    Auto-detect Stockfish binary location.

    Returns:
        Path to Stockfish binary

    Raises:
        FileNotFoundError: If Stockfish not found
    """
    candidates = [
        "stockfish",
        "/usr/local/bin/stockfish",
        "/usr/bin/stockfish",
        "/usr/games/stockfish",
        "/opt/homebrew/bin/stockfish",
    ]

    for candidate in candidates:
        path = shutil.which(candidate)
        if path:
            return path

    raise FileNotFoundError(
        "Stockfish not found. Install with: brew install stockfish (macOS) "
        "or apt install stockfish (Linux)"
    )


class StockfishEngine(LocalEngine):
    """A single local engine instance. One evaluation at a time."""

    def __init__(
        self,
        stockfish_path: Optional[str] = None,
        threads: int = 1,
        multipv: int = 2,
    ):
        """
        Initialize Stockfish instance.

        Args:
            stockfish_path: Path to Stockfish binary (None = auto-detect)
            threads: Number of threads for the Stockfish process
            multipv: Number of ranked lines to report

        Raises:
            FileNotFoundError: If Stockfish binary not found
        """
        if stockfish_path is None:
            stockfish_path = find_stockfish()

        if not Path(stockfish_path).exists():
            raise FileNotFoundError(
                f"Stockfish binary not found at: {stockfish_path}\n"
                "Install with: brew install stockfish (macOS) or apt install stockfish (Linux)"
            )

        self.stockfish_path = stockfish_path
        self.threads = threads
        self.multipv = multipv

        self._depth = 0
        self._process: Optional[subprocess.Popen] = None
        self._lock = threading.Lock()

    @property
    def depth(self) -> int:
        """Deepest search depth reported so far in the current evaluation."""
        return self._depth

    def evaluate(self, fen: str, depth: int) -> List[EvaluationLine]:
        """
        Evaluate a position.

        Args:
            fen: Position to evaluate
            depth: Search depth

        Returns:
            Lines ranked from 1, scores from White's point of view. Empty for
            positions with no legal moves.

        Raises:
            EngineProcessError: If the process dies before 'bestmove'
        """
        self._depth = 0
        process = subprocess.Popen(
            [self.stockfish_path],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
        )
        with self._lock:
            self._process = process

        try:
            return self._search(process, fen, depth)
        finally:
            with self._lock:
                self._process = None
            self._close(process)

    def _search(self, process: subprocess.Popen, fen: str, depth: int) -> List[EvaluationLine]:
        commands = [
            "uci",
            f"setoption name Threads value {self.threads}",
            f"setoption name MultiPV value {self.multipv}",
            "isready",
            f"position fen {fen}",
            f"go depth {depth}",
        ]

        try:
            for cmd in commands:
                process.stdin.write(cmd + "\n")
            process.stdin.flush()
        except (BrokenPipeError, OSError) as e:
            raise EngineProcessError(f"Stockfish exited during setup: {e}") from e

        latest: Dict[int, InfoLine] = {}
        finished = False

        for line in process.stdout:
            line = line.strip()

            if line.startswith("bestmove"):
                finished = True
                break

            info = parse_info_line(line)
            if info is None:
                continue

            latest[info.multipv] = info
            if info.depth > self._depth:
                self._depth = info.depth

        if not finished:
            raise EngineProcessError(
                f"Stockfish exited without a best move (code {process.poll()})"
            )

        self._depth = depth
        black_to_move = fen.split()[1:2] == ["b"]

        lines = []
        for rank, multipv in enumerate(sorted(latest), start=1):
            info = latest[multipv]
            score = -info.score if black_to_move else info.score
            lines.append(
                EvaluationLine(
                    rank=rank,
                    depth=info.depth,
                    move_uci=info.move_uci,
                    evaluation=Evaluation(info.score_type, score),
                )
            )

        return lines

    def _close(self, process: subprocess.Popen):
        try:
            process.stdin.write("quit\n")
            process.stdin.flush()
        except (BrokenPipeError, OSError, ValueError):
            pass

        try:
            process.wait(timeout=1.0)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()

    def stop(self):
        """Kill a running search. The pending evaluate() call raises."""
        with self._lock:
            if self._process is not None and self._process.poll() is None:
                logger.debug(f"Killing Stockfish process {self._process.pid}")
                self._process.kill()
