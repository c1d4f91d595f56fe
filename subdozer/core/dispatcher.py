"""Keyboard command dispatch.

Two entry points:

- ``handle_field_key``: a key pressed while a cue's text field has focus. The
  binding table is tested in ``FIELD_RESOLUTION_ORDER``; the first matching
  action runs against that cue.
- ``handle_global_key``: a key pressed anywhere else. Only play/pause (without
  the cue range logic) and a bare Tab, which jumps into the list at the
  playhead, are handled there.

Both return True when the key was consumed so the caller can suppress the
widget's own handling.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from PySide6.QtCore import QObject, Signal

from .cues import Cue, Selection, index_of
from .keybindings import Action, KeyEvent, KeybindingTable
from .session import SubtitleSession
from .settings import EditorSettings
from .tracker import nearest_cue

logger = logging.getLogger(__name__)


class PlaybackControl(Protocol):
    def play_from(self, t: float) -> None: ...

    def pause(self) -> None: ...


class KeybindingDispatcher(QObject):
    """Resolves key events to editing and playback commands.

    Signals:
        actionTriggered(str): value of the Action that ran (``"global-tab"``
            for the list-entry Tab).
    """

    actionTriggered = Signal(str)

    def __init__(
        self,
        session: SubtitleSession,
        playback: Optional[PlaybackControl] = None,
        table: Optional[KeybindingTable] = None,
        settings: Optional[EditorSettings] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.session = session
        self.playback = playback
        self.table = table if table is not None else KeybindingTable()
        self.settings = settings if settings is not None else EditorSettings()

    def set_playback(self, playback: Optional[PlaybackControl]):
        self.playback = playback

    # --- Field scoped ---
    def handle_field_key(
        self,
        event: KeyEvent,
        cue_id: int,
        text: str,
        cursor: int,
        selection: Optional[Selection] = None,
    ) -> bool:
        action = self.table.match(event)
        if action is None:
            return False
        cue = self.session.find(cue_id)
        if cue is None:
            # Row outlived its cue; swallow the key, nothing to act on.
            return True
        if action is Action.SPLIT:
            new_id = self.session.split_at(cue_id, text, cursor)
            if new_id is not None:
                self.session.request_focus(new_id)
        elif action is Action.SET_START:
            self.session.set_start_to_current(cue_id)
        elif action is Action.MERGE:
            self.session.merge_into_previous(cue_id, selection)
        elif action is Action.PLAYPAUSE:
            self._play_pause_cue(cue)
        elif action is Action.NEXT:
            self._focus_adjacent(cue_id, 1)
        elif action is Action.PREV:
            self._focus_adjacent(cue_id, -1)
        logger.debug("field key %s -> %s on cue %d", event.key, action.value, cue_id)
        self.actionTriggered.emit(action.value)
        return True

    def _play_pause_cue(self, cue: Cue):
        if self.playback is None:
            return
        snap = self.session.snapshot
        if snap.paused:
            self.playback.play_from(cue.start)
        elif cue.start <= snap.time <= cue.end:
            self.playback.pause()
        else:
            self.playback.play_from(cue.start)

    def _focus_adjacent(self, cue_id: int, step: int):
        cues = self.session.cues
        idx = index_of(cues, cue_id)
        target = idx + step
        if 0 <= target < len(cues):
            self.session.request_focus(cues[target].id)
        elif step > 0 and self.settings.tab_creates_new_at_end:
            new_id = self.session.insert_at(len(cues))
            self.session.request_focus(new_id)

    # --- Global ---
    def handle_global_key(self, event: KeyEvent, field_focused: bool = False) -> bool:
        if field_focused:
            return False
        if self.table.matches(Action.PLAYPAUSE, event):
            self._play_pause_global()
            self.actionTriggered.emit(Action.PLAYPAUSE.value)
            return True
        if _is_bare_tab(event):
            snap = self.session.snapshot
            target = nearest_cue(self.session.cues, snap.time)
            if target is None:
                return False
            self.session.request_focus(target.id)
            self.actionTriggered.emit("global-tab")
            return True
        return False

    def _play_pause_global(self):
        if self.playback is None:
            return
        snap = self.session.snapshot
        if snap.paused:
            self.playback.play_from(snap.time)
        else:
            self.playback.pause()


def _is_bare_tab(event: KeyEvent) -> bool:
    return (
        event.key.lower() == "tab"
        and not (event.ctrl or event.alt or event.shift or event.meta)
    )


__all__ = ["PlaybackControl", "KeybindingDispatcher"]
