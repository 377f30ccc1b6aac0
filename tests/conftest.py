"""Shared test fixtures for Claude Revert."""

from pathlib import Path
from types import SimpleNamespace

import pytest

from claude_revert.services.config_manager import ConfigManager
from claude_revert.services.revert_ledger import RevertLedger
from claude_revert.services.revert_service import RevertService
from claude_revert.utils.path_codec import encode_path

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def edits_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "session_with_edits.jsonl"


@pytest.fixture
def malformed_session_path(fixtures_dir) -> Path:
    return fixtures_dir / "malformed_session.jsonl"


@pytest.fixture
def workspace(tmp_path):
    """A working directory plus its matching Claude project log directory."""
    cwd = tmp_path / "work" / "my_app"
    cwd.mkdir(parents=True)
    projects_root = tmp_path / ".claude" / "projects"
    log_dir = projects_root / encode_path(str(cwd))
    log_dir.mkdir(parents=True)
    return SimpleNamespace(cwd=cwd, projects_root=projects_root, log_dir=log_dir)


@pytest.fixture
def config(tmp_path) -> ConfigManager:
    return ConfigManager(settings_path=tmp_path / "config" / "settings.json")


@pytest.fixture
def ledger_path(tmp_path) -> Path:
    return tmp_path / "state" / "reverts.db"


@pytest.fixture
def ledger(ledger_path):
    led = RevertLedger(ledger_path)
    yield led
    led.close()


@pytest.fixture
def service(workspace, config, ledger):
    svc = RevertService(
        cwd=str(workspace.cwd),
        projects_root=workspace.projects_root,
        config=config,
        ledger=ledger,
    )
    svc.init()
    yield svc
    svc.close()
