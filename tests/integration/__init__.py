"""
Integration tests for the screenplay cast bootstrap.

This package exercises the full detection pipeline from raw screenplay text
through review and roster export, including the command-line entry point.
"""

__version__ = '1.0.0'
