"""
Unit Tests for Chess Review

This package contains unit tests for all chess review components.

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_worker_pool.py

    # Run with coverage
    pytest tests/ --cov=chess_review --cov-report=html

Dependencies:
    - pytest: Test framework
    - pytest-cov: Coverage reporting
    - Stockfish (optional): tests that need a real binary are skipped without it
"""
