"""
Tests for the Lichess cloud evaluation client.

HTTP is stubbed with a mocked requests.Session.
"""

from unittest.mock import MagicMock

import pytest
import requests

from chess_review.data.positions import CENTIPAWN, MATE
from chess_review.evaluation.cloud import (
    UNAVAILABLE,
    CloudEvaluationClient,
    LookupResult,
)

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def make_response(payload=None, status_code=200, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return CloudEvaluationClient(depth=18, session=session)


class TestCloudLookup:
    """Test successful lookups."""

    def test_two_lines_is_authoritative(self, client, session):
        """Test a two-line payload is normalized and ranked."""
        session.get.return_value = make_response(
            {
                "fen": START_FEN,
                "depth": 40,
                "pvs": [
                    {"moves": "e2e4 e7e5 g1f3", "cp": 18},
                    {"moves": "d2d4 d7d5", "cp": 15},
                ],
            }
        )

        result = client.lookup(START_FEN)

        assert result.available
        assert result.is_authoritative
        assert [line.rank for line in result.lines] == [1, 2]
        assert result.lines[0].move_uci == "e2e4"
        assert result.lines[0].evaluation.type == CENTIPAWN
        assert result.lines[0].evaluation.value == 18
        assert result.lines[1].move_uci == "d2d4"
        assert all(line.depth == 18 for line in result.lines)

    def test_request_parameters(self, client, session):
        """Test the FEN and line count are sent as query parameters."""
        session.get.return_value = make_response({"pvs": []})

        client.lookup(START_FEN)

        _, kwargs = session.get.call_args
        assert kwargs["params"] == {"fen": START_FEN, "multiPv": 2}
        assert kwargs["timeout"] == client.timeout

    def test_depth_per_lookup(self, client, session):
        """Test a requested depth is recorded without changing the client."""
        session.get.return_value = make_response(
            {"pvs": [{"cp": 18, "moves": "e2e4 e7e5"}, {"cp": 12, "moves": "d2d4 d7d5"}]}
        )

        result = client.lookup(START_FEN, depth=20)

        assert all(line.depth == 20 for line in result.lines)
        assert client.depth == 18

    def test_mate_lines(self, client, session):
        """Test mate scores are tagged as forced mates."""
        session.get.return_value = make_response(
            {"pvs": [{"moves": "h5f7", "mate": 1}, {"moves": "d1h5", "cp": 250}]}
        )

        result = client.lookup(START_FEN)

        assert result.lines[0].evaluation.type == MATE
        assert result.lines[0].evaluation.value == 1
        assert result.lines[0].evaluation.is_mate
        assert result.lines[1].evaluation.type == CENTIPAWN

    @pytest.mark.parametrize(
        "cloud_move, expected",
        [
            ("e1h1", "e1g1"),
            ("e8h8", "e8g8"),
            ("e1a1", "e1c1"),
            ("e8a8", "e8c8"),
            ("e1g1", "e1g1"),
        ],
    )
    def test_castling_remap(self, client, session, cloud_move, expected):
        """Test king-takes-rook castling is rewritten to king-moves-two."""
        session.get.return_value = make_response(
            {"pvs": [{"moves": f"{cloud_move} a7a6", "cp": 20}, {"moves": "d2d4", "cp": 10}]}
        )

        result = client.lookup(START_FEN)

        assert result.lines[0].move_uci == expected

    def test_single_line_not_authoritative(self, client, session):
        """Test a one-line hit is available but not authoritative."""
        session.get.return_value = make_response({"pvs": [{"moves": "e2e4", "cp": 20}]})

        result = client.lookup(START_FEN)

        assert result.available
        assert len(result.lines) == 1
        assert not result.is_authoritative


class TestCloudUnavailable:
    """Test every failure mode maps to UNAVAILABLE."""

    @pytest.mark.parametrize("status_code", [404, 429, 500, 503])
    def test_non_success_status(self, client, session, status_code):
        session.get.return_value = make_response(status_code=status_code)

        assert client.lookup(START_FEN) is UNAVAILABLE

    @pytest.mark.parametrize(
        "error",
        [requests.ConnectionError("down"), requests.Timeout("slow")],
    )
    def test_network_failure(self, client, session, error):
        session.get.side_effect = error

        assert client.lookup(START_FEN) is UNAVAILABLE

    def test_invalid_json(self, client, session):
        session.get.return_value = make_response(json_error=ValueError("not json"))

        assert client.lookup(START_FEN) is UNAVAILABLE

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"pvs": None},
            {"pvs": [{"moves": "e2e4"}]},
            {"pvs": [{"moves": "e2e4", "cp": "lots"}]},
            ["not", "a", "dict"],
        ],
    )
    def test_malformed_payload(self, client, session, payload):
        session.get.return_value = make_response(payload)

        assert client.lookup(START_FEN) is UNAVAILABLE

    def test_unavailable_is_never_authoritative(self):
        assert not UNAVAILABLE.available
        assert not UNAVAILABLE.is_authoritative
        assert not LookupResult(available=False, lines=[]).is_authoritative
