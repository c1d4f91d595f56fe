"""Mutex-guarded adapter around a MoviePy clip.

The playback controller and the preview share one decoder; every frame read
goes through the adapter's lock.
"""

from __future__ import annotations

import logging

try:
    from moviepy import VideoFileClip
except ImportError:  # pragma: no cover
    VideoFileClip = None  # type: ignore

from PySide6.QtCore import QMutex

logger = logging.getLogger(__name__)


class ClipAdapter:
    def __init__(self, clip, source: str | None = None):
        self._clip = clip
        self._mutex = QMutex()
        self.source = source

    @property
    def clip(self):
        return self._clip

    @property
    def duration(self) -> float:
        return float(getattr(self._clip, "duration", 0.0) or 0.0)

    @property
    def fps(self) -> float:
        return float(getattr(self._clip, "fps", 0.0) or 0.0)

    @property
    def has_audio(self) -> bool:
        return getattr(self._clip, "audio", None) is not None

    def get_frame(self, t: float):
        t = max(0.0, min(t, self.duration)) if self.duration > 0 else 0.0
        self._mutex.lock()
        try:
            return self._clip.get_frame(t)
        finally:
            self._mutex.unlock()

    def close(self):
        close = getattr(self._clip, "close", None)
        if close is None:
            return
        self._mutex.lock()
        try:
            close()
        finally:
            self._mutex.unlock()

    @classmethod
    def from_path(cls, path: str) -> "ClipAdapter":
        if VideoFileClip is None:
            raise RuntimeError("MoviePy not available")
        clip = VideoFileClip(path)
        logger.info("opened %s (%.2fs @ %s fps)", path, clip.duration, clip.fps)
        return cls(clip, source=path)

    @classmethod
    def from_clip(cls, clip) -> "ClipAdapter":
        return cls(clip)


__all__ = ["ClipAdapter"]
