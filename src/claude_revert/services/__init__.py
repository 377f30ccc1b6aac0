"""Services for Claude Revert."""

from claude_revert.services.revert_service import RevertService
from claude_revert.services.change_tracker import ChangeTracker
from claude_revert.services.revert_ledger import RevertLedger
from claude_revert.services.session_locator import SessionLocator, select_latest
from claude_revert.services.config_manager import ConfigManager
from claude_revert.services.turn_builder import build_turns

__all__ = [
    "RevertService",
    "ChangeTracker",
    "RevertLedger",
    "SessionLocator",
    "select_latest",
    "ConfigManager",
    "build_turns",
]
