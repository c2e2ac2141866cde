"""
Pytest configuration and fixtures for rolecall tests.
"""

import os
import tempfile
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from jose import jwt
from typer.testing import CliRunner

from rolecall.config import clear_config_cache
from rolecall.providers import clear_provider_manager
from rolecall.tools import ToolCatalog, DEFAULT_TOOLS


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_environment(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """
    Point ROLECALL_HOME at an empty directory and drop ROLECALL_* overrides.

    Also runs from a directory with no project config and clears cached
    singletons around each test.
    """
    for key in list(os.environ):
        if key.startswith("ROLECALL_"):
            monkeypatch.delenv(key)

    home = temp_dir / ".rolecall"
    (home / "profiles").mkdir(parents=True)
    monkeypatch.setenv("ROLECALL_HOME", str(home))

    workdir = temp_dir / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    clear_config_cache()
    clear_provider_manager()
    yield home
    clear_config_cache()
    clear_provider_manager()


@pytest.fixture
def rolecall_home(isolated_environment: Path) -> Path:
    """The isolated ~/.rolecall directory."""
    return isolated_environment


@pytest.fixture
def mock_project_dir(temp_dir: Path) -> Generator[Path, None, None]:
    """Provide a project directory with a .rolecall/ folder."""
    project_dir = temp_dir / "test-project"
    (project_dir / ".rolecall").mkdir(parents=True)
    yield project_dir


@pytest.fixture
def catalog() -> ToolCatalog:
    """A fresh catalog with the default tools."""
    return ToolCatalog(DEFAULT_TOOLS)


@pytest.fixture
def make_jwt() -> Callable[..., str]:
    """Build unsigned-for-our-purposes JWTs with a chosen expiry."""

    def _make(expires_in: timedelta | None = timedelta(hours=1), **claims) -> str:
        payload = {"sub": "user-1", **claims}
        if expires_in is not None:
            payload["exp"] = int((datetime.now(timezone.utc) + expires_in).timestamp())
        return jwt.encode(payload, "test-secret", algorithm="HS256")

    return _make


@pytest.fixture
def sample_config() -> dict:
    """Provide a sample configuration dictionary."""
    return {
        "remote": {
            "base_url": "https://directory.example.com",
            "read_timeout": 20,
        },
        "auth": {
            "client_id": "client-123",
            "tenant": "contoso",
            "scopes": ["api://directory/.default"],
        },
        "resolver": {
            "use_llm": False,
        },
        "providers": {
            "default": "openai/gpt-4o-mini",
            "fallback": ["anthropic/claude-3-5-haiku-latest"],
            "aliases": {
                "fast": "openai/gpt-4o-mini",
            },
        },
    }
