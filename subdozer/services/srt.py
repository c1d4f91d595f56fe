"""SRT and plain-text codecs for cue lists.

Both parsers are forgiving: a block that does not look like a subtitle is
skipped rather than aborting the import. Ids are assigned from 1 in document
order; the index numbers written in an SRT file are ignored.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from ..core.cues import Cue
from ..utils.timefmt import format_srt_timecode, parse_timecode

logger = logging.getLogger(__name__)

DEFAULT_SECONDS_PER_LINE = 5.0


def parse_srt(document: str) -> List[Cue]:
    blocks = document.replace("\r", "").split("\n\n")
    out: List[Cue] = []
    skipped = 0
    next_id = 1
    for block in blocks:
        lines = [line for line in block.split("\n") if line]
        if len(lines) < 2:
            if lines:
                skipped += 1
            continue
        idx = 1 if lines[0].strip().isdigit() else 0
        times = lines[idx].split("-->")
        if len(times) != 2:
            skipped += 1
            continue
        start = parse_timecode(times[0])
        end = parse_timecode(times[1])
        text = "\n".join(lines[idx + 1 :])
        out.append(Cue(next_id, start, end, text))
        next_id += 1
    if skipped:
        logger.warning("skipped %d malformed SRT block(s)", skipped)
    return out


def stringify_srt(cues: Iterable[Cue]) -> str:
    """Serialize cues as SRT, numbering blocks from 1 in list order."""
    return "\n".join(
        f"{n}\n{format_srt_timecode(c.start)} --> {format_srt_timecode(c.end)}\n{c.text}\n"
        for n, c in enumerate(cues, start=1)
    )


def parse_plain_text(
    text: str, seconds_per_line: float = DEFAULT_SECONDS_PER_LINE
) -> List[Cue]:
    """One cue per non-blank line, each ``seconds_per_line`` long, back to back."""
    out: List[Cue] = []
    t = 0.0
    for line in text.replace("\r", "").split("\n"):
        if not line.strip():
            continue
        out.append(Cue(len(out) + 1, t, t + seconds_per_line, line))
        t += seconds_per_line
    return out


__all__ = [
    "DEFAULT_SECONDS_PER_LINE",
    "parse_srt",
    "stringify_srt",
    "parse_plain_text",
]
