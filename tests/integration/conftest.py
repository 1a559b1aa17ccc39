"""
Configuration file for integration tests.

Provides on-disk screenplays and keeps the CLI from reconfiguring the root
logger while tests run.
"""

import pytest

import app


@pytest.fixture
def quiet_cli(monkeypatch):
    """Run app.main without installing file and console log handlers."""
    monkeypatch.setattr(app, "setup_logging", lambda debug=False: None)
    return app.main


@pytest.fixture
def script_file(tmp_path):
    """Write screenplay text to a UTF-8 file and return its path."""
    def _write(text, name="script.txt"):
        path = tmp_path / name
        path.write_text(text, encoding='utf-8')
        return path
    return _write
