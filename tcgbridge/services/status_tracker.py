"""
Import status tracking.

In-memory map from card id to the state of its most recent import, for
the admin UI to render. Lives for the process/session; nothing is
persisted.

State machine per card id:

    idle --begin--> running --complete--> succeeded | partial | failed
      ^                                         |
      +------------------- begin ---------------+

INVARIANTS:
- At most one running entry per id; a second begin() is rejected
- complete() only applies to a running id; late or duplicate
  completions are logged and ignored, and never create entries
- query() always succeeds; unknown ids are idle
"""

import logging
from dataclasses import dataclass
from enum import Enum

from tcgbridge.models.import_result import ImportResult, ImportStatus

logger = logging.getLogger(__name__)


class TrackerState(str, Enum):
    """Lifecycle state of one card's import."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"


_TERMINAL_STATES: dict[ImportStatus, TrackerState] = {
    ImportStatus.SUCCEEDED: TrackerState.SUCCEEDED,
    ImportStatus.PARTIAL: TrackerState.PARTIAL,
    ImportStatus.FAILED_VALIDATION: TrackerState.FAILED,
    ImportStatus.FAILED_REMOTE: TrackerState.FAILED,
}


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Read model for one card id."""

    state: TrackerState
    result: ImportResult | None = None

    @property
    def is_running(self) -> bool:
        return self.state is TrackerState.RUNNING


IDLE = StatusSnapshot(state=TrackerState.IDLE)


class StatusTracker:
    """
    Tracks import state per card id.

    Pass one instance to both the import path and the UI read path.
    """

    def __init__(self) -> None:
        self._entries: dict[str, StatusSnapshot] = {}

    def begin(self, card_id: str) -> bool:
        """
        Mark an import as running, clearing any previous result.

        Returns:
            True if the run was started, False if one is already running
        """
        current = self._entries.get(card_id)
        if current is not None and current.is_running:
            logger.warning("import_already_running", extra={"card_id": card_id})
            return False

        self._entries[card_id] = StatusSnapshot(state=TrackerState.RUNNING)
        return True

    def complete(self, card_id: str, result: ImportResult) -> bool:
        """
        Record the terminal result of a running import.

        Returns:
            True if applied, False if the id was not running (ignored)

        Raises:
            ValueError: If the result is not terminal
        """
        if not result.is_terminal:
            raise ValueError(f"Cannot complete import with non-terminal status {result.status}")

        current = self._entries.get(card_id)
        if current is None or not current.is_running:
            logger.warning(
                "import_completion_ignored",
                extra={
                    "card_id": card_id,
                    "state": current.state.value if current else TrackerState.IDLE.value,
                    "status": result.status.value,
                },
            )
            return False

        self._entries[card_id] = StatusSnapshot(
            state=_TERMINAL_STATES[result.status],
            result=result,
        )
        return True

    def query(self, card_id: str) -> StatusSnapshot:
        """Current state and result for a card id; idle if unknown."""
        return self._entries.get(card_id, IDLE)

    def running_ids(self) -> list[str]:
        """Ids with an import in flight."""
        return [card_id for card_id, entry in self._entries.items() if entry.is_running]

    def is_any_running(self) -> bool:
        """Whether any import is in flight (the UI disables import buttons)."""
        return any(entry.is_running for entry in self._entries.values())

    def reset(self) -> None:
        """Forget everything, as on session end."""
        self._entries.clear()


# Default tracker instance (one per process/session)
_tracker: StatusTracker | None = None


def get_status_tracker() -> StatusTracker:
    """
    Get the default status tracker.

    Returns:
        Singleton StatusTracker shared by the import and status routes
    """
    global _tracker
    if _tracker is None:
        _tracker = StatusTracker()
    return _tracker
