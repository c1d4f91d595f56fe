import numpy as np
from PySide6.QtCore import QEventLoop, QTimer
from PySide6.QtWidgets import QApplication

from subdozer.media.playback import VideoPlaybackController

_app = None


def _ensure_app():
    global _app
    if _app is None:
        _app = QApplication.instance() or QApplication([])


def _spin(ms):
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


class DummyClip:
    def __init__(self, duration=2.0, fps=20):
        self.duration = duration
        self.fps = fps

    def get_frame(self, t):
        return np.zeros((4, 4, 3), dtype=np.uint8)


def _loaded(duration=2.0, fps=20):
    _ensure_app()
    controller = VideoPlaybackController()
    controller.load(DummyClip(duration, fps))
    return controller


def test_load_reports_duration_and_first_frame():
    _ensure_app()
    controller = VideoPlaybackController()
    loaded, frames, times = [], [], []
    controller.clipLoaded.connect(loaded.append)
    controller.frameReady.connect(lambda frame, t: frames.append(t))
    controller.timeUpdated.connect(lambda t, paused: times.append((t, paused)))
    controller.load(DummyClip(duration=3.0))
    assert loaded == [3.0]
    assert frames == [0.0]
    assert times == [(0.0, True)]
    assert controller.is_loaded()
    assert controller.duration() == 3.0


def test_unloaded_controller_ignores_transport():
    _ensure_app()
    controller = VideoPlaybackController()
    controller.play()
    controller.seek(1.0)
    assert controller.is_paused()
    assert controller.position() == 0.0


def test_seek_clamps_to_clip():
    controller = _loaded(duration=2.0)
    controller.seek(99.0)
    assert controller.position() == 2.0
    controller.seek(-1.0)
    assert controller.position() == 0.0


def test_play_from_then_pause():
    controller = _loaded(duration=2.0)
    times = []
    controller.timeUpdated.connect(lambda t, paused: times.append((t, paused)))
    controller.play_from(0.5)
    assert not controller.is_paused()
    assert times[-1] == (0.5, False)
    _spin(120)
    controller.pause()
    assert controller.position() > 0.5
    assert times[-1] == (controller.position(), True)
    snap = controller.snapshot()
    assert snap.paused and snap.time == controller.position()


def test_play_at_end_rewinds():
    controller = _loaded(duration=1.0)
    controller.seek(1.0)
    controller.play()
    assert controller.position() == 0.0
    controller.pause()


def test_playback_monotonic_qtimer():
    controller = _loaded(duration=2.0, fps=15)
    positions = []
    controller.positionChanged.connect(positions.append)
    controller.play()
    loop = QEventLoop()
    iterations = {"count": 0}

    def step():
        iterations["count"] += 1
        if iterations["count"] >= 25:
            loop.quit()
        else:
            QTimer.singleShot(25, step)

    QTimer.singleShot(25, step)
    loop.exec()
    controller.pause()
    assert positions == sorted(positions), (
        "Playback positions should be monotonic increasing"
    )
    assert len(positions) > 5


def test_reaching_the_end_pauses():
    controller = _loaded(duration=0.1, fps=50)
    states = []
    controller.stateChanged.connect(states.append)
    controller.play()
    _spin(300)
    assert controller.is_paused()
    assert controller.position() == 0.1
    assert states[-1] == "paused"


def test_seeked_fires_for_jumps_only():
    controller = _loaded(duration=2.0)
    jumps = []
    controller.seeked.connect(jumps.append)
    controller.seek(1.25)
    controller.play()
    _spin(80)
    controller.pause()
    controller.play_from(0.5)
    controller.pause()
    assert jumps == [1.25, 0.5]
