import pytest
from moviepy import ColorClip

from subdozer.media.clip_adapter import ClipAdapter


class RecordingClip:
    duration = 2.0
    fps = 10

    def __init__(self):
        self.requested = []
        self.closed = False

    def get_frame(self, t):
        self.requested.append(t)
        return t

    def close(self):
        self.closed = True


def test_clip_adapter_basic(tmp_path):
    video_path = tmp_path / "color.mp4"
    clip = ColorClip(size=(32, 32), color=(0, 255, 0), duration=0.5)
    clip.write_videofile(str(video_path), fps=24)
    clip.close()
    adapter = ClipAdapter.from_path(str(video_path))
    assert adapter.duration == pytest.approx(0.5, abs=0.05)
    assert adapter.source == str(video_path)
    frame = adapter.get_frame(0.1)
    assert frame.shape[0] == 32 and frame.shape[1] == 32
    assert not adapter.has_audio  # ColorClip has no audio
    adapter.close()


def test_clip_adapter_clamps_frame_time():
    clip = RecordingClip()
    adapter = ClipAdapter.from_clip(clip)
    assert adapter.duration == 2.0 and adapter.fps == 10.0
    adapter.get_frame(-1.0)
    adapter.get_frame(5.0)
    adapter.get_frame(1.25)
    assert clip.requested == [0.0, 2.0, 1.25]
    adapter.close()
    assert clip.closed
