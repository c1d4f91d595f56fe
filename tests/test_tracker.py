from PySide6.QtCore import QEventLoop, QTimer
from PySide6.QtWidgets import QApplication

from subdozer.core.cues import Cue
from subdozer.core.tracker import ActiveCueTracker, active_cue, nearest_cue

_app = None


def _ensure_app():
    global _app
    if _app is None:
        _app = QApplication.instance() or QApplication([])


def _spin(ms):
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


CUES = [Cue(1, 0.0, 2.0, "a"), Cue(2, 2.0, 5.0, "b"), Cue(3, 8.0, 9.0, "c")]


def test_active_cue_closed_interval_first_wins():
    assert active_cue(CUES, 0.0).id == 1
    assert active_cue(CUES, 2.0).id == 1  # shared boundary: list order wins
    assert active_cue(CUES, 5.0).id == 2
    assert active_cue(CUES, 6.0) is None
    assert active_cue([], 1.0) is None


def test_active_cue_follows_list_order_not_time():
    cues = [Cue(1, 10.0, 20.0), Cue(2, 0.0, 30.0)]
    assert active_cue(cues, 15.0).id == 1
    assert active_cue(cues, 5.0).id == 2


def test_nearest_cue_by_midpoint():
    assert nearest_cue(CUES, 3.0).id == 2
    assert nearest_cue(CUES, 6.0).id == 2  # midpoints 3.5 vs 8.5
    assert nearest_cue(CUES, 7.0).id == 3
    assert nearest_cue(CUES, 100.0).id == 3
    assert nearest_cue([], 1.0) is None


def test_tracker_emits_only_on_transition():
    _ensure_app()
    tracker = ActiveCueTracker()
    changes, reveals = [], []
    tracker.activeChanged.connect(changes.append)
    tracker.revealRequested.connect(reveals.append)
    tracker.update(CUES, 0.5)
    tracker.update(CUES, 1.0)
    tracker.update(CUES, 3.0)
    tracker.update(CUES, 6.0)
    assert changes == [1, 2, None]
    assert reveals == [1, 2]
    assert tracker.active_id() is None


def test_anchored_cue_reveal_is_delayed():
    _ensure_app()
    tracker = ActiveCueTracker(reveal_delay_ms=40)
    reveals = []
    tracker.revealRequested.connect(reveals.append)
    tracker.note_start_anchored(2)
    tracker.update(CUES, 3.0)
    assert tracker.active_id() == 2
    assert reveals == []
    assert tracker.is_reveal_pending()
    _spin(150)
    assert reveals == [2]
    assert not tracker.is_reveal_pending()
    # Marker is consumed by the reveal; the next visit is immediate.
    tracker.update(CUES, 6.0)
    tracker.update(CUES, 3.0)
    assert reveals == [2, 2]


def test_newer_transition_cancels_pending_reveal():
    _ensure_app()
    tracker = ActiveCueTracker(reveal_delay_ms=40)
    reveals = []
    tracker.revealRequested.connect(reveals.append)
    tracker.note_start_anchored(2)
    tracker.update(CUES, 3.0)
    tracker.update(CUES, 8.5)
    assert reveals == [3]
    _spin(150)
    assert reveals == [3]


def test_transition_to_nothing_cancels_pending_reveal():
    _ensure_app()
    tracker = ActiveCueTracker(reveal_delay_ms=40)
    reveals = []
    tracker.revealRequested.connect(reveals.append)
    tracker.note_start_anchored(2)
    tracker.update(CUES, 3.0)
    tracker.update(CUES, 6.0)
    _spin(150)
    assert reveals == []


def test_reset_clears_active_id():
    _ensure_app()
    tracker = ActiveCueTracker()
    changes = []
    tracker.update(CUES, 0.5)
    tracker.activeChanged.connect(changes.append)
    tracker.reset()
    assert changes == [None]
    assert tracker.active_id() is None
