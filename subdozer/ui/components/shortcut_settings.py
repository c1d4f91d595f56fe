"""Shortcut settings panel.

Lists every action with its current binding. Clicking a binding (or its Edit
button) arms a BindingCapture for that action; the next non-modifier key
press becomes the new binding. The panel also carries the "Tab on the last
cue creates a new one" option.
"""

from __future__ import annotations

from typing import Dict

from PySide6.QtCore import QEvent, Signal
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import (
    QCheckBox,
    QGridLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ...core.keybindings import (
    ACTION_LABELS,
    Action,
    BindingCapture,
    KeybindingTable,
    binding_to_label,
)
from ...core.settings import EditorSettings
from .subtitle_list import key_event_from_qt


class _CaptureField(QLineEdit):
    """Read-only field that hands key presses to the panel while armed."""

    def __init__(self, panel: "ShortcutSettingsWidget", action: Action):
        super().__init__()
        self._panel = panel
        self._action = action
        self.setReadOnly(True)
        self.setFixedWidth(180)

    def focusInEvent(self, event):  # type: ignore[override]
        super().focusInEvent(event)
        self._panel.beginCapture(self._action)

    def focusOutEvent(self, event):  # type: ignore[override]
        super().focusOutEvent(event)
        self._panel.endCaptureFor(self._action)

    def event(self, event):  # type: ignore[override]
        # Tab would otherwise move focus before keyPressEvent sees it.
        if event.type() == QEvent.Type.KeyPress and self._panel.capture.editing is self._action:
            self.keyPressEvent(event)
            return True
        return super().event(event)

    def keyPressEvent(self, event: QKeyEvent):  # type: ignore[override]
        if self._panel.capture.editing is self._action:
            self._panel.captureKey(key_event_from_qt(event))
            event.accept()
            return
        super().keyPressEvent(event)


class ShortcutSettingsWidget(QWidget):
    """Editor for the keybinding table and tab behavior.

    Signals:
        bindingChanged(str): value of the Action whose binding was replaced.
        tabCreatesNewChanged(bool)
    """

    bindingChanged = Signal(str)
    tabCreatesNewChanged = Signal(bool)

    def __init__(self, table: KeybindingTable, settings: EditorSettings, parent=None):
        super().__init__(parent)
        self.table = table
        self.settings = settings
        self.capture = BindingCapture(table)
        self._fields: Dict[Action, _CaptureField] = {}
        self._buttons: Dict[Action, QPushButton] = {}

        layout = QVBoxLayout()
        title = QLabel("Keyboard shortcuts")
        title.setStyleSheet("font-weight:bold;")
        layout.addWidget(title)
        layout.addWidget(QLabel("Click a shortcut, then press the keys to assign."))
        grid = QGridLayout()
        for row, action in enumerate(Action):
            grid.addWidget(QLabel(ACTION_LABELS[action]), row, 0)
            field = _CaptureField(self, action)
            grid.addWidget(field, row, 1)
            btn = QPushButton("Edit")
            btn.clicked.connect(lambda _=False, a=action: self._onEditClicked(a))
            grid.addWidget(btn, row, 2)
            self._fields[action] = field
            self._buttons[action] = btn
        layout.addLayout(grid)
        self.reset_btn = QPushButton("Restore defaults")
        self.reset_btn.clicked.connect(self._onReset)
        layout.addWidget(self.reset_btn)
        self.tab_checkbox = QCheckBox("Tab on the last cue adds a new cue and moves to it")
        self.tab_checkbox.setChecked(settings.tab_creates_new_at_end)
        self.tab_checkbox.toggled.connect(self._onTabToggled)
        layout.addWidget(self.tab_checkbox)
        layout.addStretch(1)
        self.setLayout(layout)
        self.refresh()

    def refresh(self):
        for action, field in self._fields.items():
            field.setText(binding_to_label(self.table.get(action)))
            editing = self.capture.editing is action
            self._buttons[action].setText("Press keys…" if editing else "Edit")

    def beginCapture(self, action: Action):
        self.capture.begin(action)
        self.refresh()

    def endCaptureFor(self, action: Action):
        if self.capture.editing is action:
            self.capture.cancel()
            self.refresh()

    def captureKey(self, event) -> bool:
        action = self.capture.editing
        binding = self.capture.capture(event)
        if binding is None or action is None:
            return False
        self.refresh()
        self.bindingChanged.emit(action.value)
        return True

    # --- Internal ---
    def _onEditClicked(self, action: Action):
        self._fields[action].setFocus()
        self.beginCapture(action)

    def _onReset(self):
        self.capture.cancel()
        self.table.reset()
        self.refresh()
        for action in Action:
            self.bindingChanged.emit(action.value)

    def _onTabToggled(self, checked: bool):
        self.settings.tab_creates_new_at_end = checked
        self.tabCreatesNewChanged.emit(checked)


__all__ = ["ShortcutSettingsWidget"]
