"""
Unit Tests for Backgammon Engine

This package contains unit tests for all backgammon engine components.

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_evaluation.py

    # Run with coverage
    pytest tests/ --cov=backgammon_engine --cov-report=html

    # Run specific test
    pytest tests/test_engine.py::TestEvaluationEngine::test_fallback_without_native

Dependencies:
    - pytest: Test framework
    - pytest-cov: Coverage reporting
"""
