"""Editing session: the single writer of the cue list.

The session applies the pure operations from ``subdozer.core.cues`` to its
current list and publishes every new list through ``cuesChanged``. It also
keeps the latest playback snapshot, feeds the active-cue tracker, and defers
focus requests by one event-loop turn so views rebuilt from ``cuesChanged``
exist before focus moves into them.

Signals:
    cuesChanged(list): the new cue list after any change.
    activeChanged(object): active cue id or None (from the tracker).
    revealRequested(int): row to scroll into view (from the tracker).
    focusRequested(int): text field of this cue should take focus.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from PySide6.QtCore import QObject, QTimer, Signal

from . import cues as ops
from .cues import Cue, PlaybackSnapshot, Selection
from .tracker import ActiveCueTracker
from ..services.srt import (
    DEFAULT_SECONDS_PER_LINE,
    parse_plain_text,
    parse_srt,
    stringify_srt,
)

logger = logging.getLogger(__name__)


class SubtitleSession(QObject):
    cuesChanged = Signal(object)
    activeChanged = Signal(object)
    revealRequested = Signal(int)
    focusRequested = Signal(int)

    def __init__(self, parent: Optional[QObject] = None, *, reveal_delay_ms: int = 1000):
        super().__init__(parent)
        self._cues: List[Cue] = []
        self._snapshot = PlaybackSnapshot()
        self.tracker = ActiveCueTracker(self, reveal_delay_ms=reveal_delay_ms)
        self.tracker.activeChanged.connect(self.activeChanged.emit)
        self.tracker.revealRequested.connect(self.revealRequested.emit)

    # --- State ---
    @property
    def cues(self) -> List[Cue]:
        return list(self._cues)

    @property
    def snapshot(self) -> PlaybackSnapshot:
        return self._snapshot

    def find(self, cue_id: int) -> Optional[Cue]:
        return ops.find_cue(self._cues, cue_id)

    def active_id(self) -> Optional[int]:
        return self.tracker.active_id()

    # --- Import / export ---
    def replace(self, cues: Sequence[Cue]):
        """Swap in a new list (an import); tracking starts over."""
        self.tracker.reset()
        self._commit(list(cues))

    def load_srt(self, document: str) -> List[Cue]:
        parsed = parse_srt(document)
        self.replace(parsed)
        return parsed

    def load_plain_text(
        self, text: str, seconds_per_line: float = DEFAULT_SECONDS_PER_LINE
    ) -> List[Cue]:
        parsed = parse_plain_text(text, seconds_per_line)
        self.replace(parsed)
        return parsed

    def export_srt(self) -> str:
        return stringify_srt(self._cues)

    # --- Structural edits ---
    def insert_at(self, index: int) -> int:
        new, new_id = ops.insert_at(self._cues, index)
        self._commit(new)
        return new_id

    def insert_after(self, cue_id: int) -> Optional[int]:
        new, new_id = ops.insert_after(self._cues, cue_id)
        if new_id is not None:
            self._commit(new)
        return new_id

    def delete(self, cue_id: int) -> bool:
        if ops.index_of(self._cues, cue_id) < 0:
            return False
        self._commit(ops.delete_by_id(self._cues, cue_id))
        return True

    def update(self, cue_id: int, **patch) -> bool:
        if ops.index_of(self._cues, cue_id) < 0:
            return False
        self._commit(ops.update_field(self._cues, cue_id, **patch))
        return True

    def set_start_to_current(self, cue_id: int) -> bool:
        new, anchored = ops.set_start_to_time(self._cues, cue_id, self._snapshot.time)
        if anchored is None:
            return False
        # Mark before committing so a transition caused by this edit is delayed.
        self.tracker.note_start_anchored(anchored)
        self._commit(new)
        return True

    def set_end_to_current(self, cue_id: int) -> bool:
        if ops.index_of(self._cues, cue_id) < 0:
            return False
        self._commit(ops.set_end_to_time(self._cues, cue_id, self._snapshot.time))
        return True

    def split_at(self, cue_id: int, text: str, cursor: int) -> Optional[int]:
        new, new_id = ops.split(self._cues, cue_id, text, cursor, self._snapshot.time)
        if new_id is None:
            return None
        self._commit(new)
        return new_id

    def merge_into_previous(
        self, cue_id: int, selection: Optional[Selection] = None
    ) -> bool:
        if ops.index_of(self._cues, cue_id) <= 0:
            return False
        self._commit(ops.merge(self._cues, cue_id, selection))
        return True

    # --- Playback ---
    def on_time_update(self, time: float, paused: bool):
        self._snapshot = PlaybackSnapshot(time=time, paused=paused)
        self.tracker.update(self._cues, time)

    # --- Focus ---
    def request_focus(self, cue_id: int):
        """Ask views to focus ``cue_id`` once the current event has been handled."""
        QTimer.singleShot(0, lambda: self._emit_focus(cue_id))

    def _emit_focus(self, cue_id: int):
        if ops.index_of(self._cues, cue_id) >= 0:
            self.focusRequested.emit(cue_id)

    # Internal
    def _commit(self, new: List[Cue]):
        self._cues = new
        self.cuesChanged.emit(list(new))
        self.tracker.update(self._cues, self._snapshot.time)


__all__ = ["SubtitleSession"]
