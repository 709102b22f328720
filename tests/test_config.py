"""Tests for review configuration."""

import pytest

from chess_review.config import LICHESS_CLOUD_EVAL_URL, ReviewConfig


def test_defaults():
    config = ReviewConfig()

    assert config.target_depth == 16
    assert config.max_concurrency == 8
    assert config.max_attempts == 2
    assert config.cloud_enabled
    assert config.cloud_url == LICHESS_CLOUD_EVAL_URL
    assert config.timeout is None


@pytest.mark.parametrize(
    "field, value",
    [
        ("target_depth", 0),
        ("max_concurrency", 0),
        ("max_attempts", 0),
        ("stockfish_threads", -1),
        ("cloud_timeout", 0),
        ("tick_interval", 0),
        ("timeout", -5),
    ],
)
def test_invalid_values_raise(field, value):
    with pytest.raises(ValueError):
        ReviewConfig(**{field: value})
