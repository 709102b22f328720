"""
Tests for the Stockfish UCI driver.

Most tests drive a scripted stand-in binary so they run without Stockfish;
tests against the real engine are skipped when it is not installed.
"""

import stat
import sys

import chess
import pytest

from chess_review.data.positions import CENTIPAWN, MATE
from chess_review.evaluation.stockfish import (
    EngineProcessError,
    StockfishEngine,
    parse_info_line,
)

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses shell scripts")

FAKE_OUTPUT = """\
id name FakeFish
uciok
readyok
info string NNUE enabled
info depth 1 seldepth 1 multipv 1 score cp 20 nodes 20 nps 2000 pv e2e4 e7e5
info depth 1 seldepth 1 multipv 2 score cp 10 nodes 20 nps 2000 pv d2d4
info depth 2 seldepth 2 multipv 1 score cp 35 nodes 80 nps 4000 pv e2e4
info depth 2 seldepth 3 multipv 2 score mate 3 nodes 80 nps 4000 pv g1f3 g8f6
bestmove e2e4 ponder e7e5
"""


def write_script(path, body):
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IEXEC)
    return str(path)


@pytest.fixture
def fake_stockfish(tmp_path):
    """A binary that waits for 'go' and prints canned analysis."""
    output = tmp_path / "output.txt"
    output.write_text(FAKE_OUTPUT)
    body = (
        'while read line; do\n'
        '  case "$line" in go*) break;; esac\n'
        'done\n'
        f'cat "{output}"\n'
        'read line\n'
    )
    return write_script(tmp_path / "fakefish", body)


@pytest.fixture
def crashing_stockfish(tmp_path):
    """A binary that dies after receiving 'go'."""
    body = (
        'while read line; do\n'
        '  case "$line" in go*) break;; esac\n'
        'done\n'
        'echo "info depth 1 multipv 1 score cp 5 pv e2e4"\n'
        'exit 3\n'
    )
    return write_script(tmp_path / "crashfish", body)


@pytest.fixture
def stockfish_engine():
    """Create a real Stockfish instance."""
    try:
        return StockfishEngine()
    except FileNotFoundError:
        pytest.skip("Stockfish not installed")


class TestParseInfoLine:
    """Test UCI info line parsing."""

    def test_centipawn_line(self):
        info = parse_info_line(
            "info depth 12 seldepth 18 multipv 2 score cp -41 nodes 1000 pv c7c5 g1f3"
        )

        assert info.depth == 12
        assert info.multipv == 2
        assert info.score_type == CENTIPAWN
        assert info.score == -41
        assert info.move_uci == "c7c5"

    def test_mate_line(self):
        info = parse_info_line("info depth 5 multipv 1 score mate -2 pv h7h8")

        assert info.score_type == MATE
        assert info.score == -2

    def test_bound_line(self):
        """Test lowerbound/upperbound markers do not break parsing."""
        info = parse_info_line("info depth 9 multipv 1 score cp 50 lowerbound nodes 10 pv e2e4")

        assert info.score == 50

    def test_missing_multipv_defaults_to_one(self):
        assert parse_info_line("info depth 3 score cp 1 pv a2a3").multipv == 1

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "bestmove e2e4",
            "info string NNUE evaluation enabled",
            "info depth 0 score mate 0",
            "info depth 4 currmove e2e4 currmovenumber 1",
            "info depth x multipv 1 score cp 1 pv e2e4",
            "info depth 3 multipv 1 score cp 1 pv",
        ],
    )
    def test_lines_without_scored_pv(self, line):
        assert parse_info_line(line) is None


class TestStockfishEngine:
    """Test the UCI driver against a scripted binary."""

    def test_invalid_path_raises_error(self):
        with pytest.raises(FileNotFoundError):
            StockfishEngine(stockfish_path="/nonexistent/stockfish")

    def test_ranked_lines_white_to_move(self, fake_stockfish):
        """Test the deepest line per rank is kept."""
        engine = StockfishEngine(stockfish_path=fake_stockfish)

        lines = engine.evaluate(chess.STARTING_FEN, 2)

        assert [line.rank for line in lines] == [1, 2]
        assert lines[0].move_uci == "e2e4"
        assert lines[0].depth == 2
        assert lines[0].evaluation.type == CENTIPAWN
        assert lines[0].evaluation.value == 35
        assert lines[1].move_uci == "g1f3"
        assert lines[1].evaluation.type == MATE
        assert lines[1].evaluation.value == 3

    def test_black_to_move_scores_flipped(self, fake_stockfish):
        """Test side-to-move scores are converted to White's point of view."""
        engine = StockfishEngine(stockfish_path=fake_stockfish)
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"

        lines = engine.evaluate(fen, 2)

        assert lines[0].evaluation.value == -35
        assert lines[1].evaluation.value == -3

    def test_depth_reaches_target(self, fake_stockfish):
        engine = StockfishEngine(stockfish_path=fake_stockfish)
        assert engine.depth == 0

        engine.evaluate(chess.STARTING_FEN, 2)

        assert engine.depth == 2

    def test_process_crash_raises(self, crashing_stockfish):
        """Test an engine exit before 'bestmove' is an error."""
        engine = StockfishEngine(stockfish_path=crashing_stockfish)

        with pytest.raises(EngineProcessError):
            engine.evaluate(chess.STARTING_FEN, 10)

    def test_stop_without_search_is_noop(self, fake_stockfish):
        StockfishEngine(stockfish_path=fake_stockfish).stop()


class TestRealStockfish:
    """Tests against an installed Stockfish."""

    def test_starting_position(self, stockfish_engine):
        lines = stockfish_engine.evaluate(chess.STARTING_FEN, 8)

        assert len(lines) == 2
        assert lines[0].rank == 1
        assert lines[0].evaluation.type == CENTIPAWN
        assert abs(lines[0].evaluation.value) < 100
        assert stockfish_engine.depth == 8

    def test_mate_in_one(self, stockfish_engine):
        """Test Black to move and mate is reported from White's side."""
        fen = "6k1/5ppp/8/8/8/8/5PPP/3q2K1 b - - 0 1"
        lines = stockfish_engine.evaluate(fen, 8)

        assert lines[0].evaluation.is_mate
        assert lines[0].evaluation.value < 0

    def test_checkmated_position(self, stockfish_engine):
        """Test a position with no legal moves has no lines."""
        board = chess.Board()
        for san in ["f3", "e5", "g4", "Qh4#"]:
            board.push_san(san)

        assert stockfish_engine.evaluate(board.fen(), 5) == []
