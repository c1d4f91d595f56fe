"""Active-cue tracking.

``active_cue`` maps a playback time to the first cue (in list order) whose
closed interval contains it. ``ActiveCueTracker`` wraps it for the UI: it only
announces id transitions, and it holds back the reveal (scroll-into-view) of a
row whose start was just anchored to the playhead so the row does not jump
away while the operator is still working on it.

Reveal scheduling uses a single single-shot QTimer: a newer transition stops
the pending one before anything else happens, so only the latest reveal can
fire.
"""

from __future__ import annotations

from typing import Optional, Sequence

from PySide6.QtCore import QObject, QTimer, Signal

from .cues import Cue


def active_cue(cues: Sequence[Cue], time: float) -> Optional[Cue]:
    for cue in cues:
        if cue.start <= time <= cue.end:
            return cue
    return None


def nearest_cue(cues: Sequence[Cue], time: float) -> Optional[Cue]:
    """Active cue at ``time``, else the cue whose midpoint is closest to it."""
    found = active_cue(cues, time)
    if found is not None:
        return found
    best: Optional[Cue] = None
    best_dist = float("inf")
    for cue in cues:
        dist = abs(cue.midpoint - time)
        if dist < best_dist:
            best, best_dist = cue, dist
    return best


class ActiveCueTracker(QObject):
    """Tracks the active cue id and emits reveal requests.

    Signals:
        activeChanged(object): new active id, or None.
        revealRequested(int): row with this id should be scrolled into view.
    """

    activeChanged = Signal(object)
    revealRequested = Signal(int)

    def __init__(self, parent: Optional[QObject] = None, *, reveal_delay_ms: int = 1000):
        super().__init__(parent)
        self._active_id: Optional[int] = None
        self._anchored_id: Optional[int] = None
        self._pending_id: Optional[int] = None
        self._reveal_timer = QTimer(self)
        self._reveal_timer.setSingleShot(True)
        self._reveal_timer.setInterval(reveal_delay_ms)
        self._reveal_timer.timeout.connect(self._fire_delayed_reveal)

    def active_id(self) -> Optional[int]:
        return self._active_id

    def is_reveal_pending(self) -> bool:
        return self._reveal_timer.isActive()

    def note_start_anchored(self, cue_id: int):
        """Mark ``cue_id`` as just anchored; its next reveal is delayed."""
        self._anchored_id = cue_id

    def update(self, cues: Sequence[Cue], time: float) -> Optional[int]:
        found = active_cue(cues, time)
        new_id = found.id if found is not None else None
        if new_id != self._active_id:
            self._active_id = new_id
            self._on_transition(new_id)
            self.activeChanged.emit(new_id)
        return new_id

    def reset(self):
        self._reveal_timer.stop()
        self._pending_id = None
        self._anchored_id = None
        if self._active_id is not None:
            self._active_id = None
            self.activeChanged.emit(None)

    # Internal
    def _on_transition(self, new_id: Optional[int]):
        # Any transition supersedes a reveal that has not fired yet.
        self._reveal_timer.stop()
        self._pending_id = None
        if new_id is None:
            return
        if new_id == self._anchored_id:
            self._pending_id = new_id
            self._reveal_timer.start()
        else:
            self.revealRequested.emit(new_id)

    def _fire_delayed_reveal(self):
        cue_id = self._pending_id
        self._pending_id = None
        self._anchored_id = None
        if cue_id is not None:
            self.revealRequested.emit(cue_id)


__all__ = ["active_cue", "nearest_cue", "ActiveCueTracker"]
