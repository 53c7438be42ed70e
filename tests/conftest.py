"""Pytest configuration and shared fixtures for blame-split tests."""

import pytest

import blame_split.io.logging_setup
from tests.harness import (
    FakeContent,
    FakeGitBackend,
    FakeGutter,
    FakeScheduler,
    scenario_entries,
)


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep settings and logs out of the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("BLAME_SPLIT_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("BLAME_SPLIT_LOG_FILE", raising=False)
    monkeypatch.delenv("BLAME_SPLIT_LOG_LEVEL", raising=False)
    monkeypatch.delenv("BLAME_SPLIT_SEED_HUE", raising=False)
    yield tmp_path
    blame_split.io.logging_setup.reset()


# ---------------------------------------------------------------------------
# Navigator doubles
# ---------------------------------------------------------------------------

@pytest.fixture
def backend():
    """Fake git backend with the five-line scenario as the working tree."""
    fake = FakeGitBackend()
    fake.add_revision(None, scenario_entries())
    return fake


@pytest.fixture
def gutter():
    return FakeGutter(width=40)


@pytest.fixture
def content():
    return FakeContent([entry[3] for entry in scenario_entries()], title="file.py")


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def notices():
    """List collecting (message, severity) notifications."""
    return []
