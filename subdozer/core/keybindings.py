"""Configurable keybindings.

A binding is a key name plus the exact set of modifiers that must be held.
Matching is exact on modifiers: ``Ctrl+Enter`` does not fire for
``Ctrl+Shift+Enter``. Key names compare case-insensitively and every spelling
of the space bar compares as ``"space"``.

Key events reach this module as toolkit-neutral ``KeyEvent`` values; the UI
layer converts Qt events (see ``subdozer.ui.components.subtitle_list``).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional


class Action(str, enum.Enum):
    SPLIT = "split"
    NEXT = "next"
    PREV = "prev"
    PLAYPAUSE = "playpause"
    MERGE = "merge"
    SET_START = "setStart"


# Evaluation order while a cue's text field has focus; first match wins.
FIELD_RESOLUTION_ORDER = (
    Action.SPLIT,
    Action.SET_START,
    Action.MERGE,
    Action.PLAYPAUSE,
    Action.NEXT,
    Action.PREV,
)

ACTION_LABELS = {
    Action.SPLIT: "Split cue at cursor",
    Action.NEXT: "Edit next cue",
    Action.PREV: "Edit previous cue",
    Action.PLAYPAUSE: "Play / pause",
    Action.MERGE: "Merge into previous cue",
    Action.SET_START: "Set start to current time",
}

_SPACE_NAMES = {"", " ", "space", "spacebar"}
_MODIFIER_KEYS = {"control", "ctrl", "shift", "alt", "meta", "altgr", "super"}


@dataclass(frozen=True)
class KeyEvent:
    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    meta: bool = False

    def is_modifier_only(self) -> bool:
        return self.key.lower() in _MODIFIER_KEYS


@dataclass(frozen=True)
class Binding:
    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    meta: bool = False


DEFAULT_KEYBINDINGS: Mapping[Action, Binding] = {
    Action.SPLIT: Binding("Enter", ctrl=True),
    Action.NEXT: Binding("Tab"),
    Action.PREV: Binding("Tab", shift=True),
    Action.PLAYPAUSE: Binding("Space", ctrl=True),
    Action.MERGE: Binding("Backspace", ctrl=True),
    Action.SET_START: Binding("t", ctrl=True),
}


def normalize_key(key: str) -> str:
    if key.lower() in _SPACE_NAMES:
        return "space"
    return key.lower()


def binding_matches(binding: Binding, event: KeyEvent) -> bool:
    return (
        normalize_key(binding.key) == normalize_key(event.key)
        and binding.ctrl == event.ctrl
        and binding.alt == event.alt
        and binding.shift == event.shift
        and binding.meta == event.meta
    )


def binding_from_event(event: KeyEvent) -> Binding:
    return Binding(
        event.key, ctrl=event.ctrl, alt=event.alt, shift=event.shift, meta=event.meta
    )


def binding_to_label(binding: Binding) -> str:
    parts = []
    if binding.ctrl:
        parts.append("Ctrl")
    if binding.alt:
        parts.append("Alt")
    if binding.shift:
        parts.append("Shift")
    if binding.meta:
        parts.append("Meta")
    if normalize_key(binding.key) == "space":
        parts.append("Space")
    else:
        key = binding.key
        parts.append(key.upper() if len(key) == 1 else key[0].upper() + key[1:])
    return " + ".join(parts)


class KeybindingTable:
    """Total mapping from every Action to exactly one Binding."""

    def __init__(self, bindings: Optional[Mapping[Action, Binding]] = None):
        self._bindings: Dict[Action, Binding] = dict(DEFAULT_KEYBINDINGS)
        if bindings:
            for action, binding in bindings.items():
                self.set(action, binding)

    def get(self, action: Action) -> Binding:
        return self._bindings[Action(action)]

    def set(self, action: Action, binding: Binding) -> None:
        self._bindings[Action(action)] = binding

    def reset(self) -> None:
        self._bindings = dict(DEFAULT_KEYBINDINGS)

    def as_dict(self) -> Dict[Action, Binding]:
        return dict(self._bindings)

    def match(
        self, event: KeyEvent, order: Iterable[Action] = FIELD_RESOLUTION_ORDER
    ) -> Optional[Action]:
        for action in order:
            if binding_matches(self._bindings[action], event):
                return action
        return None

    def matches(self, action: Action, event: KeyEvent) -> bool:
        return binding_matches(self.get(action), event)


class BindingCapture:
    """Edit mode of the shortcut settings panel.

    Idle, or capturing the next key press for one action. Beginning a capture
    for another action while one is active simply retargets it.
    """

    def __init__(self, table: KeybindingTable):
        self._table = table
        self.editing: Optional[Action] = None

    @property
    def is_editing(self) -> bool:
        return self.editing is not None

    def begin(self, action: Action) -> None:
        self.editing = Action(action)

    def cancel(self) -> None:
        self.editing = None

    def capture(self, event: KeyEvent) -> Optional[Binding]:
        if self.editing is None or event.is_modifier_only():
            return None
        binding = binding_from_event(event)
        self._table.set(self.editing, binding)
        self.editing = None
        return binding


__all__ = [
    "Action",
    "ACTION_LABELS",
    "FIELD_RESOLUTION_ORDER",
    "KeyEvent",
    "Binding",
    "DEFAULT_KEYBINDINGS",
    "normalize_key",
    "binding_matches",
    "binding_from_event",
    "binding_to_label",
    "KeybindingTable",
    "BindingCapture",
]
