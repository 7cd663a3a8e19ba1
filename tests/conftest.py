"""Pytest configuration for discomatic tests."""

# No manual modification of ``sys.path`` is required.  The tests rely solely on
# the standard Python import mechanism and the package installation performed by
# the test environment.

import pytest


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path, monkeypatch):
    """Keep user options and JSON logs out of the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("DISCOMATIC_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("DISCOMATIC_CONFIG", raising=False)
    monkeypatch.delenv("DISCOMATIC_CATALOG_USERNAME", raising=False)
    monkeypatch.delenv("DISCOMATIC_CATALOG_PASSWORD", raising=False)
