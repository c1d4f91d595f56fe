from PySide6.QtCore import QEventLoop, QTimer
from PySide6.QtWidgets import QApplication

from subdozer.core.cues import Cue
from subdozer.core.session import SubtitleSession

_app = None


def _ensure_app():
    global _app
    if _app is None:
        _app = QApplication.instance() or QApplication([])


def _spin(ms=20):
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


DOC = (
    "1\n00:00:00,000 --> 00:00:05,000\na\n\n"
    "2\n00:00:05,000 --> 00:00:12,000\nb\n"
)


def _session():
    _ensure_app()
    session = SubtitleSession()
    session.load_srt(DOC)
    return session


def test_load_srt_publishes_once():
    _ensure_app()
    session = SubtitleSession()
    published = []
    session.cuesChanged.connect(published.append)
    cues = session.load_srt(DOC)
    assert published == [cues]
    assert session.cues == cues
    assert session.export_srt() == DOC


def test_cues_property_is_a_copy():
    session = _session()
    session.cues.clear()
    assert len(session.cues) == 2


def test_set_start_uses_playback_snapshot():
    session = _session()
    session.on_time_update(10.5, True)
    assert session.set_start_to_current(2)
    assert session.cues == [Cue(1, 0.0, 10.5, "a"), Cue(2, 10.5, 12.0, "b")]


def test_set_end_uses_playback_snapshot():
    session = _session()
    session.on_time_update(4.25, False)
    assert session.snapshot.paused is False
    assert session.set_end_to_current(1)
    assert session.find(1).end == 4.25


def test_unknown_id_edits_publish_nothing():
    session = _session()
    published = []
    session.cuesChanged.connect(published.append)
    assert session.insert_after(9) is None
    assert not session.delete(9)
    assert not session.update(9, text="x")
    assert not session.set_start_to_current(9)
    assert not session.set_end_to_current(9)
    assert session.split_at(9, "x", 0) is None
    assert not session.merge_into_previous(9)
    assert not session.merge_into_previous(1)
    assert published == []


def test_structural_edits():
    session = _session()
    new_id = session.insert_after(1)
    assert [c.id for c in session.cues] == [1, new_id, 2]
    assert session.update(new_id, text="mid")
    assert session.delete(1)
    assert [c.text for c in session.cues] == ["mid", "b"]
    assert session.merge_into_previous(2)
    assert [c.text for c in session.cues] == ["midb"]


def test_active_cue_follows_time_and_edits():
    session = _session()
    active = []
    session.activeChanged.connect(active.append)
    session.on_time_update(6.0, False)
    assert session.active_id() == 2
    session.delete(2)
    assert session.active_id() is None
    assert active == [2, None]


def test_focus_request_is_deferred():
    session = _session()
    focused = []
    session.focusRequested.connect(focused.append)
    new_id = session.split_at(1, "ab", 1)
    session.request_focus(new_id)
    assert focused == []
    _spin()
    assert focused == [new_id]


def test_focus_request_for_removed_cue_is_dropped():
    session = _session()
    focused = []
    session.focusRequested.connect(focused.append)
    session.request_focus(2)
    session.delete(2)
    _spin()
    assert focused == []


def test_load_plain_text_replaces_and_resets_tracking():
    session = _session()
    session.on_time_update(1.0, True)
    assert session.active_id() == 1
    cues = session.load_plain_text("one\ntwo", seconds_per_line=3)
    assert [(c.start, c.end) for c in cues] == [(0.0, 3.0), (3.0, 6.0)]
    assert session.active_id() == 1
