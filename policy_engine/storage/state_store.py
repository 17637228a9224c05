"""
JSON State Store — saves and reloads a scheduler snapshot.

The scheduler itself performs no I/O; it exposes ``snapshot()`` and
``restore()``. This store is the file-backed persistence layer the game
uses between sessions. Writes are atomic: the snapshot is written to a
temporary file and renamed over the target.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from policy_engine.domain.schema import SchedulerState

logger = logging.getLogger(__name__)


class StateStoreError(Exception):
    """Base exception for state store failures."""


class StateStoreReadError(StateStoreError):
    """Raised when a saved state cannot be read or parsed."""


class StateStoreWriteError(StateStoreError):
    """Raised when a state cannot be written."""


class JSONStateStore:
    """File-backed store for a single SchedulerState."""

    def __init__(self, path: str | Path = "policy_state.json") -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> SchedulerState | None:
        """
        Load the saved state.

        Returns:
            The saved SchedulerState, or None if nothing has been saved yet.

        Raises:
            StateStoreReadError: If the file cannot be read or is malformed.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StateStoreReadError(f"Failed to read {self.path}: {e}") from e

        if not raw.strip():
            return None

        try:
            state = SchedulerState.model_validate_json(raw)
        except ValidationError as e:
            raise StateStoreReadError(f"Invalid policy state in {self.path}: {e}") from e

        logger.info(
            "Policy state loaded: %s (active=%d history=%d)",
            self.path, len(state.active), len(state.history),
        )
        return state

    def save(self, state: SchedulerState) -> None:
        """
        Atomically write ``state`` to disk.

        Raises:
            StateStoreWriteError: If the file cannot be written.
        """
        temp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
            os.replace(temp_path, self.path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise StateStoreWriteError(f"Failed to save policy state to {self.path}: {e}") from e

        logger.debug("Policy state saved: %s", self.path)

    def delete(self) -> bool:
        """Delete the saved state. Returns False if there was nothing to delete."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True
