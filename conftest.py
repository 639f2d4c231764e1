"""
Pytest configuration shared by all test packages.

Points the CLI configuration directory at a temporary path so tests never
read or write the real ~/.script-sources.
"""

import pytest

from cli.utils.config import HOME_ENV_VAR


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Use a throwaway configuration directory for every test."""
    home = tmp_path / "script-sources-home"
    monkeypatch.setenv(HOME_ENV_VAR, str(home))
    return home
