"""Cue model and the structural operations of the subtitle timeline.

Every operation is pure: it receives the current list and returns a new one.
Cues are frozen dataclasses, so an unchanged cue is shared between the old and
new list while an edited cue is replaced by a copy. List position is the
authoritative order; nothing here sorts by time, and ``end`` is never clamped
against ``start``.

Operations addressing a cue by id treat an unknown id as a no-op and hand the
input list back unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Gap used when a cue is inserted with no neighbor to derive its times from.
DEFAULT_CUE_SPAN = 2.0


@dataclass(frozen=True)
class Cue:
    id: int
    start: float  # seconds
    end: float  # seconds
    text: str = ""

    @property
    def midpoint(self) -> float:
        return (self.start + self.end) / 2

    def contains(self, t: float) -> bool:
        return self.start <= t <= self.end


@dataclass(frozen=True)
class PlaybackSnapshot:
    time: float = 0.0
    paused: bool = True


Selection = Tuple[int, int]


def round_ms(seconds: float) -> float:
    return round(seconds * 1000) / 1000


def index_of(cues: Sequence[Cue], cue_id: int) -> int:
    """Return the list position of ``cue_id`` or -1."""
    for i, cue in enumerate(cues):
        if cue.id == cue_id:
            return i
    return -1


def find_cue(cues: Sequence[Cue], cue_id: int) -> Optional[Cue]:
    idx = index_of(cues, cue_id)
    return cues[idx] if idx >= 0 else None


def next_id(cues: Sequence[Cue]) -> int:
    return max((c.id for c in cues), default=0) + 1


def insert_at(cues: Sequence[Cue], index: int) -> Tuple[List[Cue], int]:
    """Insert an empty cue at ``index``, timing it from its neighbors.

    The new cue starts where the previous one ends (or up to two seconds
    before the next one when inserted first) and ends halfway to the next
    cue's start, or two seconds later when it is last.
    """
    index = max(0, min(index, len(cues)))
    prev = cues[index - 1] if index > 0 else None
    nxt = cues[index] if index < len(cues) else None
    if prev is not None:
        start = prev.end
    elif nxt is not None:
        start = max(0.0, nxt.start - DEFAULT_CUE_SPAN)
    else:
        start = 0.0
    end = (start + nxt.start) / 2 if nxt is not None else start + DEFAULT_CUE_SPAN
    new_id = next_id(cues)
    out = list(cues)
    out.insert(index, Cue(new_id, round_ms(start), round_ms(end), ""))
    logger.debug("inserted cue %d at index %d", new_id, index)
    return out, new_id


def insert_after(cues: Sequence[Cue], cue_id: int) -> Tuple[List[Cue], Optional[int]]:
    idx = index_of(cues, cue_id)
    if idx < 0:
        return list(cues), None
    return insert_at(cues, idx + 1)


def delete_by_id(cues: Sequence[Cue], cue_id: int) -> List[Cue]:
    return [c for c in cues if c.id != cue_id]


def update_field(cues: Sequence[Cue], cue_id: int, **patch) -> List[Cue]:
    """Shallow-merge ``start``/``end``/``text`` into the matching cue."""
    unknown = set(patch) - {"start", "end", "text"}
    if unknown:
        raise TypeError(f"cannot update cue fields: {sorted(unknown)}")
    return [replace(c, **patch) if c.id == cue_id else c for c in cues]


def set_start_to_time(
    cues: Sequence[Cue], cue_id: int, time: float
) -> Tuple[List[Cue], Optional[int]]:
    """Anchor a cue's start to ``time`` and pull its predecessor's end along.

    Returns the new list plus the anchored id (``None`` when the id is
    unknown); callers use the id to hold back the reveal of that row.
    """
    idx = index_of(cues, cue_id)
    if idx < 0:
        return list(cues), None
    t = round_ms(time)
    out = list(cues)
    out[idx] = replace(out[idx], start=t)
    if idx > 0:
        out[idx - 1] = replace(out[idx - 1], end=t)
    logger.debug("anchored start of cue %d at %.3f", cue_id, t)
    return out, cue_id


def set_end_to_time(cues: Sequence[Cue], cue_id: int, time: float) -> List[Cue]:
    t = round_ms(time)
    return [replace(c, end=t) if c.id == cue_id else c for c in cues]


def _split_time(cue: Cue, playback_time: float) -> float:
    mid = cue.midpoint
    t = round_ms(playback_time)
    split_t = t if cue.start < t < cue.end else mid
    if split_t <= cue.start or split_t >= cue.end:
        split_t = mid
    return split_t


def split(
    cues: Sequence[Cue],
    cue_id: int,
    text: str,
    cursor_offset: int,
    playback_time: float,
) -> Tuple[List[Cue], Optional[int]]:
    """Split a cue at ``cursor_offset`` of ``text``.

    ``text`` is the live content of the row being edited. The split point is
    the playback time when it lies strictly inside the cue, otherwise the
    cue's midpoint. Leading newlines are stripped from the right half.
    """
    idx = index_of(cues, cue_id)
    if idx < 0:
        return list(cues), None
    cue = cues[idx]
    cursor = max(0, min(cursor_offset, len(text)))
    left = text[:cursor]
    right = text[cursor:].lstrip("\r\n")
    split_t = _split_time(cue, playback_time)
    new_id = next_id(cues)
    out = list(cues)
    out[idx] = replace(cue, end=split_t, text=left)
    out.insert(idx + 1, Cue(new_id, split_t, cue.end, right))
    logger.debug("split cue %d at %.3f into %d", cue_id, split_t, new_id)
    return out, new_id


def merge(
    cues: Sequence[Cue], cue_id: int, selection: Optional[Selection] = None
) -> List[Cue]:
    """Merge a cue into its predecessor.

    With a non-empty ``selection`` (a ``(start, end)`` character range of the
    cue's text) only the selected text moves to the end of the predecessor.
    Otherwise the predecessor absorbs the whole cue: text is concatenated,
    the end time is inherited and the cue is removed.
    """
    idx = index_of(cues, cue_id)
    if idx <= 0:
        return list(cues)
    prev, cue = cues[idx - 1], cues[idx]
    out = list(cues)
    if selection is not None:
        sel_start, sel_end = sorted(selection)
        sel_start = max(0, sel_start)
        sel_end = min(len(cue.text), sel_end)
        if sel_end > sel_start:
            moved = cue.text[sel_start:sel_end]
            out[idx - 1] = replace(prev, text=prev.text + moved)
            out[idx] = replace(cue, text=cue.text[:sel_start] + cue.text[sel_end:])
            logger.debug("moved %d chars from cue %d to %d", len(moved), cue_id, prev.id)
            return out
    text = "".join(part for part in (prev.text, cue.text) if part)
    out[idx - 1] = replace(prev, text=text, end=cue.end)
    del out[idx]
    logger.debug("merged cue %d into %d", cue_id, prev.id)
    return out


__all__ = [
    "Cue",
    "PlaybackSnapshot",
    "Selection",
    "round_ms",
    "index_of",
    "find_cue",
    "next_id",
    "insert_at",
    "insert_after",
    "delete_by_id",
    "update_field",
    "set_start_to_time",
    "set_end_to_time",
    "split",
    "merge",
]
