"""Top-level package exports.

Public API surface (keep minimal):
 - Cue, PlaybackSnapshot (subdozer.core.cues)
 - parse_srt, stringify_srt, parse_plain_text (subdozer.services.srt)

The Qt window lives in ``subdozer.ui.main_window``; it is not imported here so
the engine can be used without loading QtWidgets/QtMultimedia.
"""

from .core.cues import Cue, PlaybackSnapshot  # noqa: F401
from .services.srt import parse_plain_text, parse_srt, stringify_srt  # noqa: F401

__version__ = "0.1.0"

__all__ = ["Cue", "PlaybackSnapshot", "parse_srt", "stringify_srt", "parse_plain_text"]
