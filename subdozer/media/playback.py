"""Video playback controller & preview widget.

The controller is the editor's playback clock. It wraps a ClipAdapter and
exposes the small contract the subtitle engine relies on:

    play_from(t)   seek then play
    pause()
    timeUpdated(float, bool)   (current time, paused) after every change

plus the usual transport calls (play, toggle, seek, stop) for the video panel.

Timing: a QTimer ticks at the clip frame rate on the GUI thread. Each tick
recomputes the position from wall-clock time elapsed since play started, so a
slow decode drops frames instead of slowing the clock.

Signals:
    frameReady(np.ndarray, float)   # frame array + timestamp seconds
    positionChanged(float)
    seeked(float)                   # explicit jump, not a playback tick
    timeUpdated(float, bool)
    stateChanged(str)               # 'stopped'|'playing'|'paused'
    clipLoaded(float)               # duration
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Optional, Union

import numpy as np
from PySide6.QtCore import QObject, QSize, Qt, QTimer, Signal
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import QLabel, QSizePolicy

from ..core.cues import PlaybackSnapshot
from .clip_adapter import ClipAdapter

logger = logging.getLogger(__name__)

DEFAULT_FPS = 24.0


@dataclass
class PlaybackState:
    playing: bool = False
    position: float = 0.0
    duration: float = 0.0
    fps: float = DEFAULT_FPS


class VideoPlaybackController(QObject):
    frameReady = Signal(object, float)
    positionChanged = Signal(float)
    seeked = Signal(float)
    timeUpdated = Signal(float, bool)
    stateChanged = Signal(str)
    clipLoaded = Signal(float)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._clip_adapter: Optional[ClipAdapter] = None
        self._state = PlaybackState()
        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.PreciseTimer)
        self._timer.timeout.connect(self._tick)
        self._play_origin: Optional[float] = None  # perf_counter() at position 0

    # Public API
    def load(self, source: Union[str, ClipAdapter, object]):
        if self._timer.isActive():
            self._timer.stop()
        if isinstance(source, str):
            adapter = ClipAdapter.from_path(source)
        elif isinstance(source, ClipAdapter):
            adapter = source
        else:
            adapter = ClipAdapter.from_clip(source)
        self._clip_adapter = adapter
        self._state = PlaybackState(
            playing=False,
            position=0.0,
            duration=adapter.duration,
            fps=adapter.fps or DEFAULT_FPS,
        )
        self.clipLoaded.emit(adapter.duration)
        self.stateChanged.emit("stopped")
        self.seek(0.0)

    def is_loaded(self) -> bool:
        return self._clip_adapter is not None

    def duration(self) -> float:
        return self._state.duration

    def position(self) -> float:
        return self._state.position

    def is_paused(self) -> bool:
        return not self._state.playing

    def snapshot(self) -> PlaybackSnapshot:
        return PlaybackSnapshot(time=self._state.position, paused=not self._state.playing)

    def play(self):
        if not self._clip_adapter:
            return
        if self._state.duration > 0 and self._state.position >= self._state.duration:
            self._set_position(0.0)
        if not self._timer.isActive():
            self._play_origin = perf_counter() - self._state.position
            self._timer.start(max(1, int(1000 / self._state.fps)))
        self._state.playing = True
        self.stateChanged.emit("playing")
        self.timeUpdated.emit(self._state.position, False)

    def pause(self):
        if self._timer.isActive():
            self._timer.stop()
        self._state.playing = False
        self.stateChanged.emit("paused")
        self.timeUpdated.emit(self._state.position, True)

    def toggle(self):
        if self._state.playing:
            self.pause()
        else:
            self.play()

    def stop(self):
        self.pause()
        self.seek(0.0)
        self.stateChanged.emit("stopped")

    def seek(self, t: float, emit_frame: bool = True):
        if not self._clip_adapter:
            return
        self._set_position(t)
        if self._timer.isActive():
            self._play_origin = perf_counter() - self._state.position
        if emit_frame:
            self._emit_current_frame()
        self.seeked.emit(self._state.position)
        self._publish_position()

    def play_from(self, t: float):
        """Seek to ``t`` and start (or keep) playing."""
        self.seek(t)
        self.play()

    # Internal
    def _set_position(self, t: float):
        self._state.position = min(max(0.0, float(t)), self._state.duration)

    def _publish_position(self):
        self.positionChanged.emit(self._state.position)
        self.timeUpdated.emit(self._state.position, not self._state.playing)

    def _emit_current_frame(self):
        if not self._clip_adapter:
            return
        t = self._state.position
        try:
            array = self._clip_adapter.get_frame(t)
        except (OSError, ValueError) as e:
            logger.warning("frame decode failed at %.3f: %s", t, e)
            return
        self.frameReady.emit(array, t)

    def _tick(self):
        if not self._clip_adapter or self._play_origin is None:
            self._timer.stop()
            return
        target = perf_counter() - self._play_origin
        if target >= self._state.duration:
            self._set_position(self._state.duration)
            self.pause()
            self._publish_position()
            return
        self._state.position = target
        self._emit_current_frame()
        self._publish_position()


class VideoPreviewWidget(QLabel):
    """QLabel that shows the controller's frames scaled to fit."""

    def __init__(self, controller: VideoPlaybackController, parent=None):
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setStyleSheet("background:#222;color:#fff;font-size:18px;")
        self.setText("No video loaded")
        controller.frameReady.connect(self._onFrame)
        self._last_frame: Optional[np.ndarray] = None
        # Ignored policy lets the layout shrink the label below the pixmap size.
        self.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Ignored)

    def sizeHint(self):  # type: ignore[override]
        return QSize(320, 180)

    def _renderFrame(self):
        frame = self._last_frame
        if frame is None or self.width() <= 0 or self.height() <= 0:
            return
        if frame.ndim == 2:
            frame = np.stack([frame] * 3, axis=-1)
        frame = np.ascontiguousarray(frame[:, :, :3], dtype=np.uint8)
        h, w = frame.shape[0], frame.shape[1]
        qimg = QImage(frame.data, w, h, w * 3, QImage.Format.Format_RGB888)
        scaled = qimg.scaled(
            self.width(), self.height(), Qt.KeepAspectRatio, Qt.FastTransformation
        )
        self.setPixmap(QPixmap.fromImage(scaled))

    def _onFrame(self, frame, t: float):
        if frame is None:
            return
        self._last_frame = frame
        self._renderFrame()

    def resizeEvent(self, event):  # noqa: D401 - Qt override
        self._renderFrame()
        super().resizeEvent(event)


__all__ = ["PlaybackState", "VideoPlaybackController", "VideoPreviewWidget"]
