"""Video panel: preview + transport.

Wraps a ``VideoPlaybackController`` and a ``VideoPreviewWidget`` with a small
transport row:

    [▶/❚❚] [-5s] [+5s]  00:01.234 ──────●────── 01:30.000

Public API:
    load(path_or_clip) -> load source media into the controller
    controller (VideoPlaybackController)
    preview (VideoPreviewWidget)
"""

from __future__ import annotations

from typing import Union

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from ...media.clip_adapter import ClipAdapter
from ...media.playback import VideoPlaybackController, VideoPreviewWidget
from ...utils.timefmt import format_time


class VideoPanel(QWidget):
    def __init__(self, parent=None, *, seek_step: float = 5.0):
        super().__init__(parent)
        self.seek_step = seek_step
        self.controller = VideoPlaybackController(self)
        self.preview = VideoPreviewWidget(self.controller)

        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.preview, stretch=1)

        transport = QHBoxLayout()
        transport.setSpacing(4)
        self.btn_play = QPushButton("▶")
        self.btn_back = QPushButton(f"-{seek_step:g}s")
        self.btn_fwd = QPushButton(f"+{seek_step:g}s")
        for b in (self.btn_play, self.btn_back, self.btn_fwd):
            b.setFixedHeight(24)
            b.setMinimumWidth(36)
            transport.addWidget(b)
        self.label_current = QLabel(format_time(0.0))
        self.slider = QSlider(Qt.Horizontal)
        self.slider.setRange(0, 0)
        self.label_duration = QLabel(format_time(0.0))
        transport.addWidget(self.label_current)
        transport.addWidget(self.slider, stretch=1)
        transport.addWidget(self.label_duration)
        layout.addLayout(transport)
        self.setLayout(layout)

        self.btn_play.clicked.connect(self.controller.toggle)
        self.btn_back.clicked.connect(lambda: self._seekBy(-self.seek_step))
        self.btn_fwd.clicked.connect(lambda: self._seekBy(self.seek_step))
        self.slider.sliderMoved.connect(self._onSliderMoved)
        self.controller.clipLoaded.connect(self._onClipLoaded)
        self.controller.positionChanged.connect(self._onPosition)
        self.controller.stateChanged.connect(self._onState)

    def load(self, source: Union[str, ClipAdapter, object]):
        """Load a clip path, adapter or MoviePy clip into the controller."""
        self.controller.load(source)

    # --- Internal ---
    def _seekBy(self, delta: float):
        self.controller.seek(self.controller.position() + delta)

    def _onSliderMoved(self, value: int):
        self.controller.seek(value / 1000)

    def _onClipLoaded(self, duration: float):
        self.slider.setRange(0, int(duration * 1000))
        self.label_duration.setText(format_time(duration))

    def _onPosition(self, t: float):
        # Leave the handle alone while the user drags it.
        if not self.slider.isSliderDown():
            self.slider.blockSignals(True)
            try:
                self.slider.setValue(int(t * 1000))
            finally:
                self.slider.blockSignals(False)
        self.label_current.setText(format_time(t))

    def _onState(self, state: str):
        self.btn_play.setText("❚❚" if state == "playing" else "▶")


__all__ = ["VideoPanel"]
