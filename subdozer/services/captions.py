"""Caption import service.

Reads a subtitle source from disk and turns it into a cue list. There is no
format sniffing: the caller states whether the file is SRT or free-form text
(one cue per non-blank line). Decoding is UTF-8 with an optional BOM.

I/O and decoding errors propagate; parsing itself never fails.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import List

from ..core.cues import Cue
from .srt import DEFAULT_SECONDS_PER_LINE, parse_plain_text, parse_srt

logger = logging.getLogger(__name__)


class CaptionFormat(enum.Enum):
    SRT = "srt"
    TEXT = "text"


def parse_captions(
    text: str,
    fmt: CaptionFormat,
    seconds_per_line: float = DEFAULT_SECONDS_PER_LINE,
) -> List[Cue]:
    if fmt is CaptionFormat.SRT:
        return parse_srt(text)
    return parse_plain_text(text, seconds_per_line)


def read_captions(
    path: str | Path,
    fmt: CaptionFormat,
    seconds_per_line: float = DEFAULT_SECONDS_PER_LINE,
) -> List[Cue]:
    """Load cues from ``path``.

    Parameters
    ----------
    path: Subtitle or text file.
    fmt: Parser to use.
    seconds_per_line: Slot length for plain-text imports.
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8-sig")
    cues = parse_captions(text, fmt, seconds_per_line)
    logger.info("imported %d cue(s) from %s (%s)", len(cues), p, fmt.value)
    return cues


__all__ = ["CaptionFormat", "parse_captions", "read_captions"]
