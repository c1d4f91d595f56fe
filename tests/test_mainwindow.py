import numpy as np
from moviepy import ColorClip
from PySide6.QtCore import QEventLoop, Qt, QTimer, QUrl
from PySide6.QtMultimedia import QMediaPlayer
from PySide6.QtTest import QTest
from PySide6.QtWidgets import QApplication

from subdozer.core.settings import EditorSettings
from subdozer.services.captions import CaptionFormat
from subdozer.services.export import DEFAULT_EXPORT_NAME
from subdozer.ui.main_window import MainWindow

_app = None


def _ensure_app():
    global _app
    if _app is None:
        _app = QApplication.instance() or QApplication([])


SRT = (
    "1\n00:00:00,000 --> 00:00:01,000\nfirst\n\n"
    "2\n00:00:01,000 --> 00:00:02,000\nsecond\n"
)


def test_import_edit_export(tmp_path):
    _ensure_app()
    src = tmp_path / "in.srt"
    src.write_text(SRT, encoding="utf-8")
    win = MainWindow(settings=EditorSettings())
    assert win.loadCaptionsPath(str(src), CaptionFormat.SRT)
    assert win.subtitle_list.rowIds() == [1, 2]
    win.subtitle_list.row(2).text_edit.setPlainText("changed")
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    assert win.exportToPath(str(out_dir))
    written = (out_dir / DEFAULT_EXPORT_NAME).read_text(encoding="utf-8")
    assert written == SRT.replace("second", "changed")
    win.close()


def test_import_text_uses_configured_slot(tmp_path):
    _ensure_app()
    src = tmp_path / "lines.txt"
    src.write_text("a\nb\n", encoding="utf-8")
    win = MainWindow(settings=EditorSettings(seconds_per_line=1.5))
    assert win.loadCaptionsPath(str(src), CaptionFormat.TEXT)
    assert [c.end for c in win.session.cues] == [1.5, 3.0]
    win.close()


def test_mainwindow_load_and_preview(tmp_path):
    _ensure_app()
    video_path = tmp_path / "preview.mp4"
    clip = ColorClip(size=(48, 24), color=(0, 0, 255), duration=0.3)
    clip.write_videofile(str(video_path), fps=24)
    clip.close()

    win = MainWindow(settings=EditorSettings())
    win.loadMediaPath(str(video_path))
    loop = QEventLoop()
    QTimer.singleShot(50, loop.quit)
    loop.exec()
    pix = win.video_panel.preview.pixmap()
    assert pix is not None and not pix.isNull()
    assert win.video_controller.duration() > 0
    assert win.video_panel.slider.maximum() == int(win.video_controller.duration() * 1000)


def test_playback_time_drives_active_cue():
    _ensure_app()
    win = MainWindow(settings=EditorSettings())
    win.session.load_srt(SRT)
    win.video_controller.timeUpdated.emit(1.5, True)
    assert win.session.active_id() == 2
    assert win.session.snapshot.time == 1.5
    win.close()


def _spin(ms=30):
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


class DummyClip:
    duration = 10.0
    fps = 20

    def get_frame(self, t):
        return np.zeros((4, 4, 3), dtype=np.uint8)


class StubPlayer:
    """Stands in for QMediaPlayer; records audio positions in ms."""

    def __init__(self):
        self.positions = []
        self.state = QMediaPlayer.PlaybackState.StoppedState
        self._position = 0

    def source(self):
        return QUrl.fromLocalFile("/tmp/clip.mp4")

    def playbackState(self):
        return self.state

    def position(self):
        return self._position

    def setPosition(self, ms):
        self._position = ms
        self.positions.append(ms)

    def play(self):
        self.state = QMediaPlayer.PlaybackState.PlayingState

    def pause(self):
        self.state = QMediaPlayer.PlaybackState.PausedState


class FakePlayback:
    def __init__(self):
        self.calls = []

    def play_from(self, t):
        self.calls.append(("play_from", t))

    def pause(self):
        self.calls.append(("pause",))


def test_audio_follows_seeks_while_playing():
    _ensure_app()
    win = MainWindow(settings=EditorSettings())
    win.video_panel.load(DummyClip())
    player = StubPlayer()
    win.media_player = player
    win.video_controller.seek(2.0)
    win.video_controller.play()
    assert player.state == QMediaPlayer.PlaybackState.PlayingState
    player.positions.clear()
    win.video_panel.btn_fwd.click()
    assert player.positions[0] == 7000
    win.video_panel.btn_back.click()
    assert player.positions[-1] == 2000
    win.video_controller.pause()
    win.close()


def test_lagging_audio_is_pushed_forward():
    _ensure_app()
    win = MainWindow(settings=EditorSettings())
    player = StubPlayer()
    player.state = QMediaPlayer.PlaybackState.PlayingState
    player._position = 1000
    win.media_player = player
    win.video_controller.positionChanged.emit(1.1)  # within tolerance
    assert player.positions == []
    win.video_controller.positionChanged.emit(0.5)  # audio ahead is left alone
    assert player.positions == []
    win.video_controller.positionChanged.emit(3.0)
    assert player.positions == [3000]
    player.state = QMediaPlayer.PlaybackState.PausedState
    win.video_controller.positionChanged.emit(9.0)
    assert player.positions == [3000]
    win.close()


def test_global_keys_route_by_focus():
    _ensure_app()
    win = MainWindow(settings=EditorSettings())
    playback = FakePlayback()
    win.dispatcher.set_playback(playback)
    win.session.load_srt(
        "1\n00:00:00,000 --> 00:00:05,000\na\n\n"
        "2\n00:00:05,000 --> 00:00:10,000\nb\n"
    )
    win.session.on_time_update(6.0, True)
    win.show()
    win.activateWindow()
    QTest.qWaitForWindowActive(win)

    start_field = win.subtitle_list.row(1).start_edit
    start_field.setFocus()
    _spin()
    # Tab outside a cue field enters the list at the playhead.
    QTest.keyClick(start_field, Qt.Key_Tab)
    _spin()
    editor = win.subtitle_list.row(2).text_edit
    assert QApplication.focusWidget() is editor

    # Inside a cue field only the range-aware field path runs, once.
    QTest.keyClick(editor, Qt.Key_Space, Qt.ControlModifier)
    assert playback.calls == [("play_from", 5.0)]
    assert editor.toPlainText() == "b"
    win.close()
