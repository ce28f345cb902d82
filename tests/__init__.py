"""
Drug Testing Dashboard Test Suite

This package contains unit tests and fixtures for the dashboard's data
loading, aggregation, figures, selection state, export and CLI.

Run tests with:
    pytest tests/
    pytest tests/test_aggregation.py -v
    pytest tests/test_selection.py::TestToggle -v
"""

__version__ = "1.0.0"
