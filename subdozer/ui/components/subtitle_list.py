"""Subtitle list component.

One ``CueRow`` per cue, stacked in a scroll area. Rows are reused across list
updates (keyed by cue id) so that typing into a row, which publishes a new cue
list on every keystroke, never rebuilds the widget under the cursor.

Key presses inside a row's text field go to the KeybindingDispatcher first;
only unhandled keys reach QPlainTextEdit.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QKeyEvent, QKeySequence
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from ...core.cues import Cue, Selection
from ...core.dispatcher import KeybindingDispatcher
from ...core.keybindings import KeyEvent
from ...core.session import SubtitleSession
from ...utils.timefmt import format_editor_timecode, parse_editor_timecode

_NAMED_KEYS = {
    Qt.Key.Key_Return.value: "Enter",
    Qt.Key.Key_Enter.value: "Enter",
    Qt.Key.Key_Tab.value: "Tab",
    Qt.Key.Key_Backtab.value: "Tab",
    Qt.Key.Key_Space.value: " ",
    Qt.Key.Key_Backspace.value: "Backspace",
    Qt.Key.Key_Delete.value: "Delete",
    Qt.Key.Key_Escape.value: "Escape",
    Qt.Key.Key_Control.value: "Control",
    Qt.Key.Key_Shift.value: "Shift",
    Qt.Key.Key_Alt.value: "Alt",
    Qt.Key.Key_Meta.value: "Meta",
    Qt.Key.Key_Up.value: "ArrowUp",
    Qt.Key.Key_Down.value: "ArrowDown",
    Qt.Key.Key_Left.value: "ArrowLeft",
    Qt.Key.Key_Right.value: "ArrowRight",
}


def key_event_from_qt(event: QKeyEvent) -> KeyEvent:
    """Convert a QKeyEvent into the toolkit-neutral KeyEvent."""
    key = event.key()
    key = getattr(key, "value", key)
    mods = event.modifiers()
    name = _NAMED_KEYS.get(key)
    if name is None:
        name = QKeySequence(key).toString() or event.text()
    return KeyEvent(
        name,
        ctrl=bool(mods & Qt.ControlModifier),
        alt=bool(mods & Qt.AltModifier),
        # Qt reports Shift+Tab as Backtab, sometimes without the modifier.
        shift=bool(mods & Qt.ShiftModifier) or key == Qt.Key.Key_Backtab.value,
        meta=bool(mods & Qt.MetaModifier),
    )


def _utf16_to_index(text: str, pos: int) -> int:
    # QTextCursor positions count UTF-16 code units.
    return len(text.encode("utf-16-le")[: pos * 2].decode("utf-16-le", errors="ignore"))


class CueTextEdit(QPlainTextEdit):
    """Text field of a cue row; routes key presses through a handler first."""

    def __init__(self, cue_id: int, parent=None):
        super().__init__(parent)
        self.cue_id = cue_id
        self.keyHandler: Optional[Callable[["CueTextEdit", KeyEvent], bool]] = None
        self.setMinimumHeight(48)
        self.setMaximumHeight(72)

    def cursorOffset(self) -> int:
        return _utf16_to_index(self.toPlainText(), self.textCursor().position())

    def selectionRange(self) -> Optional[Selection]:
        cursor = self.textCursor()
        if not cursor.hasSelection():
            return None
        text = self.toPlainText()
        return (
            _utf16_to_index(text, cursor.selectionStart()),
            _utf16_to_index(text, cursor.selectionEnd()),
        )

    def keyPressEvent(self, event: QKeyEvent):  # type: ignore[override]
        if self.keyHandler is not None and self.keyHandler(self, key_event_from_qt(event)):
            event.accept()
            return
        super().keyPressEvent(event)


class CueRow(QFrame):
    """Editor row for one cue: transport buttons, time fields, text."""

    playRequested = Signal(int)
    pauseRequested = Signal(int)
    insertRequested = Signal(int)
    deleteRequested = Signal(int)
    setStartRequested = Signal(int)
    setEndRequested = Signal(int)
    fieldEdited = Signal(int, str, object)  # cue id, field name, value

    def __init__(self, cue: Cue, parent=None):
        super().__init__(parent)
        self.cue = cue
        self.setObjectName(f"sub-{cue.id}")
        self.setFrameShape(QFrame.StyledPanel)
        layout = QVBoxLayout()
        layout.setContentsMargins(6, 6, 6, 6)
        top = QHBoxLayout()
        top.setSpacing(4)
        self.btn_play = QPushButton("▶")
        self.btn_play.setToolTip("Play from just before this cue")
        self.btn_pause = QPushButton("❚❚")
        self.btn_pause.setToolTip("Pause")
        self.btn_insert = QPushButton("+")
        self.btn_insert.setToolTip("Insert a new cue after this one")
        self.btn_delete = QPushButton("🗑")
        self.btn_delete.setToolTip("Delete this cue")
        self.start_edit = QLineEdit()
        self.start_edit.setFixedWidth(110)
        self.btn_set_start = QPushButton("⏱")
        self.btn_set_start.setToolTip("Set start to the current video time")
        self.end_edit = QLineEdit()
        self.end_edit.setFixedWidth(110)
        self.btn_set_end = QPushButton("⏱")
        self.btn_set_end.setToolTip("Set end to the current video time")
        for w in (self.btn_play, self.btn_pause, self.btn_insert, self.btn_delete):
            w.setFixedWidth(30)
            top.addWidget(w)
        top.addWidget(self.start_edit)
        top.addWidget(self.btn_set_start)
        top.addWidget(QLabel("→"))
        top.addWidget(self.end_edit)
        top.addWidget(self.btn_set_end)
        top.addStretch(1)
        layout.addLayout(top)
        self.text_edit = CueTextEdit(cue.id)
        layout.addWidget(self.text_edit)
        self.setLayout(layout)

        self.btn_play.clicked.connect(lambda: self.playRequested.emit(self.cue.id))
        self.btn_pause.clicked.connect(lambda: self.pauseRequested.emit(self.cue.id))
        self.btn_insert.clicked.connect(lambda: self.insertRequested.emit(self.cue.id))
        self.btn_delete.clicked.connect(lambda: self.deleteRequested.emit(self.cue.id))
        self.btn_set_start.clicked.connect(
            lambda: self.setStartRequested.emit(self.cue.id)
        )
        self.btn_set_end.clicked.connect(lambda: self.setEndRequested.emit(self.cue.id))
        self.start_edit.editingFinished.connect(lambda: self._onTimeEdited("start"))
        self.end_edit.editingFinished.connect(lambda: self._onTimeEdited("end"))
        self.text_edit.textChanged.connect(self._onTextChanged)
        self.setCue(cue, force=True)

    def setCue(self, cue: Cue, force: bool = False):
        self.cue = cue
        if force or not self.start_edit.hasFocus():
            self.start_edit.setText(format_editor_timecode(cue.start))
        if force or not self.end_edit.hasFocus():
            self.end_edit.setText(format_editor_timecode(cue.end))
        if self.text_edit.toPlainText() != cue.text:
            self.text_edit.blockSignals(True)
            try:
                self.text_edit.setPlainText(cue.text)
            finally:
                self.text_edit.blockSignals(False)

    def setActive(self, active: bool):
        self.setStyleSheet(
            f"QFrame#{self.objectName()} {{ background:#fff6d5; }}" if active else ""
        )

    def _onTimeEdited(self, field: str):
        source = self.start_edit if field == "start" else self.end_edit
        value = parse_editor_timecode(source.text())
        if value != getattr(self.cue, field):
            self.fieldEdited.emit(self.cue.id, field, value)
        source.setText(format_editor_timecode(value))

    def _onTextChanged(self):
        self.fieldEdited.emit(self.cue.id, "text", self.text_edit.toPlainText())


class SubtitleListWidget(QWidget):
    """Scrollable list of cue rows bound to a SubtitleSession.

    Signals:
        importRequested(): user asked to load an SRT file.
        exportRequested(): user asked to export the list.
    """

    importRequested = Signal()
    exportRequested = Signal()

    def __init__(
        self,
        session: SubtitleSession,
        dispatcher: KeybindingDispatcher,
        parent=None,
        *,
        rewind_preview: float = 0.5,
    ):
        super().__init__(parent)
        self.session = session
        self.dispatcher = dispatcher
        self.rewind_preview = rewind_preview
        self._rows: Dict[int, CueRow] = {}
        self._order: List[int] = []
        self._active_id: Optional[int] = None

        outer = QVBoxLayout()
        outer.setContentsMargins(0, 0, 0, 0)
        header = QHBoxLayout()
        title = QLabel("Subtitles")
        title.setStyleSheet("font-weight:bold;")
        header.addWidget(title)
        header.addStretch(1)
        self.btn_import = QPushButton("Import SRT")
        self.btn_export = QPushButton("Export SRT")
        header.addWidget(self.btn_import)
        header.addWidget(self.btn_export)
        outer.addLayout(header)

        self.placeholder = QLabel("No subtitles loaded. Import an SRT or text file.")
        self.placeholder.setAlignment(Qt.AlignCenter)
        outer.addWidget(self.placeholder)

        self.scroll = QScrollArea()
        self.scroll.setWidgetResizable(True)
        self._container = QWidget()
        self._rows_layout = QVBoxLayout()
        self._rows_layout.setContentsMargins(0, 0, 0, 0)
        self._rows_layout.setSpacing(2)
        self._rows_layout.addStretch(1)
        self._container.setLayout(self._rows_layout)
        self.scroll.setWidget(self._container)
        outer.addWidget(self.scroll, stretch=1)
        self.setLayout(outer)

        self.btn_import.clicked.connect(self.importRequested.emit)
        self.btn_export.clicked.connect(self.exportRequested.emit)
        session.cuesChanged.connect(self.setCues)
        session.activeChanged.connect(self.setActiveId)
        session.revealRequested.connect(self.revealRow)
        session.focusRequested.connect(self.focusRow)
        self.setCues(session.cues)

    # --- Public API ---
    def row(self, cue_id: int) -> Optional[CueRow]:
        return self._rows.get(cue_id)

    def rowIds(self) -> List[int]:
        return list(self._order)

    def setCues(self, cues: Sequence[Cue]):
        seen = set()
        for cue in cues:
            seen.add(cue.id)
            row = self._rows.get(cue.id)
            if row is None:
                row = self._createRow(cue)
                self._rows[cue.id] = row
            else:
                row.setCue(cue)
        for cue_id in [i for i in self._rows if i not in seen]:
            row = self._rows.pop(cue_id)
            self._rows_layout.removeWidget(row)
            row.hide()
            row.deleteLater()
        order = [c.id for c in cues]
        if order != self._order:
            for cue_id in order:
                self._rows_layout.removeWidget(self._rows[cue_id])
            for pos, cue_id in enumerate(order):
                self._rows_layout.insertWidget(pos, self._rows[cue_id])
            self._order = order
        self.placeholder.setVisible(not order)
        self.scroll.setVisible(bool(order))
        self.btn_export.setEnabled(bool(order))

    def setActiveId(self, cue_id: Optional[int]):
        previous = self._rows.get(self._active_id) if self._active_id is not None else None
        if previous is not None:
            previous.setActive(False)
        self._active_id = cue_id
        current = self._rows.get(cue_id) if cue_id is not None else None
        if current is not None:
            current.setActive(True)

    def revealRow(self, cue_id: int):
        row = self._rows.get(cue_id)
        if row is not None:
            self.scroll.ensureWidgetVisible(row, 0, self.scroll.viewport().height() // 3)

    def focusRow(self, cue_id: int):
        row = self._rows.get(cue_id)
        if row is None:
            return
        self.scroll.ensureWidgetVisible(row)
        row.text_edit.setFocus(Qt.OtherFocusReason)

    @staticmethod
    def isCueField(widget) -> bool:
        return isinstance(widget, CueTextEdit)

    # --- Internal ---
    def _createRow(self, cue: Cue) -> CueRow:
        row = CueRow(cue, self._container)
        row.text_edit.keyHandler = self._onFieldKey
        row.playRequested.connect(self._onPlayRow)
        row.pauseRequested.connect(self._onPauseRow)
        row.insertRequested.connect(self.session.insert_after)
        row.deleteRequested.connect(self.session.delete)
        row.setStartRequested.connect(self.session.set_start_to_current)
        row.setEndRequested.connect(self.session.set_end_to_current)
        row.fieldEdited.connect(self._onFieldEdited)
        if cue.id == self._active_id:
            row.setActive(True)
        return row

    def _onFieldKey(self, editor: CueTextEdit, event: KeyEvent) -> bool:
        return self.dispatcher.handle_field_key(
            event,
            editor.cue_id,
            editor.toPlainText(),
            editor.cursorOffset(),
            editor.selectionRange(),
        )

    def _onFieldEdited(self, cue_id: int, field: str, value):
        self.session.update(cue_id, **{field: value})

    def _onPlayRow(self, cue_id: int):
        cue = self.session.find(cue_id)
        playback = self.dispatcher.playback
        if cue is not None and playback is not None:
            playback.play_from(max(0.0, cue.start - self.rewind_preview))

    def _onPauseRow(self, cue_id: int):
        if self.dispatcher.playback is not None:
            self.dispatcher.playback.pause()


__all__ = [
    "key_event_from_qt",
    "CueTextEdit",
    "CueRow",
    "SubtitleListWidget",
]
