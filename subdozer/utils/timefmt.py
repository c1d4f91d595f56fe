"""Time formatting utilities.

Three textual shapes are used across the editor:

- SRT timecodes ``HH:MM:SS,mmm`` (import/export)
- editor timecodes ``HH:MM:SS.mmm`` (the start/end fields of each cue row)
- transport labels ``MM:SS.mmm`` (``HH:`` prefixed past the first hour)

Parsing never raises: text that does not look like a timecode yields ``0.0``.
Formatting floors every component, including milliseconds, so a value is never
shown later than it really is.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP

__all__ = [
    "format_time",
    "parse_timecode",
    "format_srt_timecode",
    "parse_editor_timecode",
    "format_editor_timecode",
]

_SRT_RE = re.compile(r"(\d{2}):(\d{2}):(\d{2}),(\d{3})")
_EDITOR_RE = re.compile(r"(\d+):(\d{2}):(\d{2})(?:\.(\d{1,3}))?")


def _to_millis(seconds: float, rounding) -> int:
    # Decimal(str(x)) sidesteps binary noise such as 1.001 * 1000 == 1000.999...
    return int(
        (Decimal(str(seconds)) * Decimal(1000)).to_integral_value(rounding=rounding)
    )


def _split_millis(ms_total: int) -> tuple[int, int, int, int]:
    h, rem = divmod(ms_total, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms = divmod(rem, 1000)
    return h, m, s, ms


def format_time(seconds: float) -> str:
    """Return a human-friendly timestamp mm:ss.mmm for transport labels.

    Uses ROUND_HALF_UP semantics for milliseconds to avoid Python's bankers rounding
    edge cases (e.g., 1.2345 -> 1.235). Negative input clamps to zero, non-finite
    input (an unloaded clip reports NaN/inf durations) renders as zero. Hours are
    only shown once they are non-zero.
    """
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    h, m, s, ms = _split_millis(_to_millis(seconds, ROUND_HALF_UP))
    base = f"{m:02d}:{s:02d}.{ms:03d}"
    if h > 0:
        return f"{h:02d}:{base}"
    return base


def parse_timecode(text: str) -> float:
    """Parse an SRT timecode ``HH:MM:SS,mmm`` into seconds (0.0 if unmatched)."""
    match = _SRT_RE.search(text.strip())
    if not match:
        return 0.0
    hh, mm, ss, ms = match.groups()
    return int(hh) * 3600 + int(mm) * 60 + int(ss) + int(ms) / 1000


def _format_clock(seconds: float, sep: str) -> str:
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    h, m, s, ms = _split_millis(_to_millis(seconds, ROUND_FLOOR))
    return f"{h:02d}:{m:02d}:{s:02d}{sep}{ms:03d}"


def format_srt_timecode(seconds: float) -> str:
    return _format_clock(seconds, ",")


def parse_editor_timecode(text: str) -> float:
    """Parse ``H:MM:SS`` or ``H:MM:SS.mmm`` typed into a cue row.

    The hour group takes any number of digits and the millisecond group is
    optional; a short group is right-padded, so ``.5`` means 500 ms.
    """
    match = _EDITOR_RE.search(text.strip())
    if not match:
        return 0.0
    hh, mm, ss, ms = match.groups()
    millis = int(ms.ljust(3, "0")) if ms else 0
    return int(hh) * 3600 + int(mm) * 60 + int(ss) + millis / 1000


def format_editor_timecode(seconds: float) -> str:
    return _format_clock(seconds, ".")
