"""Editor settings.

Runtime-mutable configuration shared by the dispatcher and the UI. Nothing is
persisted; ``from_env`` lets a launcher seed the defaults:

    SUBDOZER_TAB_CREATES_NEW   "1"/"true"/"yes" enables tab-creates-new-at-end
    SUBDOZER_SECONDS_PER_LINE  slot length for plain-text imports
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from ..services.srt import DEFAULT_SECONDS_PER_LINE


@dataclass
class EditorSettings:
    tab_creates_new_at_end: bool = False
    seconds_per_line: float = DEFAULT_SECONDS_PER_LINE
    reveal_delay_ms: int = 1000
    rewind_preview: float = 0.5  # row play button starts this much before the cue
    seek_step: float = 5.0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EditorSettings":
        env = os.environ if env is None else env
        settings = cls()
        flag = env.get("SUBDOZER_TAB_CREATES_NEW")
        if flag is not None:
            settings.tab_creates_new_at_end = flag.strip().lower() in ("1", "true", "yes", "on")
        spl = env.get("SUBDOZER_SECONDS_PER_LINE")
        if spl:
            try:
                value = float(spl)
                if value > 0:
                    settings.seconds_per_line = value
            except ValueError:
                pass
        return settings


__all__ = ["EditorSettings"]
