"""SRT export.

Writes the current cue list as a UTF-8 SRT document. When the target is a
directory the file is named ``subtitles.srt``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..core.cues import Cue
from .srt import stringify_srt

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_NAME = "subtitles.srt"

ProgressCallback = Callable[[float], None]  # 0.0 - 1.0


def export_bytes(cues: Sequence[Cue]) -> bytes:
    return stringify_srt(cues).encode("utf-8")


def export_srt(
    cues: Sequence[Cue],
    output_path: str | Path,
    progress: Optional[ProgressCallback] = None,
) -> Path:
    """Write ``cues`` to ``output_path`` and return the written path.

    Parameters
    ----------
    cues: Cue list in display order.
    output_path: Destination file, or a directory to receive ``subtitles.srt``.
    progress: Optional callback receiving progress fraction.
    """
    p = Path(output_path)
    if p.is_dir():
        p = p / DEFAULT_EXPORT_NAME
    p.write_bytes(export_bytes(cues))
    logger.info("exported %d cue(s) to %s", len(cues), p)
    if progress:
        progress(1.0)
    return p


__all__ = ["DEFAULT_EXPORT_NAME", "export_bytes", "export_srt"]
