"""Main application window (UI layer).

Left: video panel. Right: subtitle list. The window owns the editing session,
the keybinding table and the dispatcher, and wires the playback controller's
time updates into the session.

Keys pressed while a cue's text field has focus are handled by the field
itself (see ``CueTextEdit``). Every other key press passes through an
application-wide event filter that offers it to the dispatcher's global path
(play/pause and the list-entry Tab).
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from PySide6.QtCore import QEvent, QObject, Qt, QUrl
from PySide6.QtGui import QAction, QGuiApplication
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer
from PySide6.QtWidgets import (
    QApplication,
    QDialog,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QSplitter,
    QStatusBar,
    QVBoxLayout,
)

from ..core.dispatcher import KeybindingDispatcher
from ..core.keybindings import KeybindingTable
from ..core.session import SubtitleSession
from ..core.settings import EditorSettings
from ..services.captions import CaptionFormat, read_captions
from ..services.export import DEFAULT_EXPORT_NAME, export_srt
from .components.preview_panel import VideoPanel
from .components.shortcut_settings import ShortcutSettingsWidget
from .components.subtitle_list import SubtitleListWidget, key_event_from_qt

logger = logging.getLogger(__name__)

# Audio behind video by more than this is moved forward.
AUDIO_DRIFT_MS = 160


class _GlobalKeyFilter(QObject):
    """Application-level filter feeding key presses to the global key path."""

    def __init__(self, window: "MainWindow"):
        super().__init__(window)
        self._window = window

    def eventFilter(self, obj, event):  # type: ignore[override]
        if event.type() != QEvent.Type.KeyPress or not self._window.isActiveWindow():
            return False
        focus = QApplication.focusWidget()
        # A press reaches the filter once per hop (window, focus widget, parents).
        if obj is not (focus if focus is not None else self._window):
            return False
        field_focused = SubtitleListWidget.isCueField(focus)
        return self._window.dispatcher.handle_global_key(
            key_event_from_qt(event), field_focused
        )


class MainWindow(QMainWindow):
    def __init__(self, settings: EditorSettings | None = None):
        super().__init__()
        self.setWindowTitle("Subdozer")
        self.setGeometry(100, 100, 1200, 700)
        self.settings = settings if settings is not None else EditorSettings.from_env()
        self.keybindings = KeybindingTable()
        self.session = SubtitleSession(self, reveal_delay_ms=self.settings.reveal_delay_ms)
        self._createEditorLayout()
        self.dispatcher.set_playback(self.video_controller)
        self._createMenuBar()
        self._createShortcutDialog()
        self._initAudio()
        self._key_filter = _GlobalKeyFilter(self)
        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self._key_filter)

    def centerOnPreferredScreen(self):
        """Center the window on SUBDOZER_SCREEN_INDEX if valid, else the primary screen."""
        screens = QGuiApplication.screens()
        if not screens:
            return
        screen = None
        idx_env = os.getenv("SUBDOZER_SCREEN_INDEX")
        if idx_env is not None:
            try:
                idx = int(idx_env)
            except ValueError:
                idx = -1
            if 0 <= idx < len(screens):
                screen = screens[idx]
        if screen is None:
            screen = QGuiApplication.primaryScreen() or screens[0]
        win_geo = self.frameGeometry()
        win_geo.moveCenter(screen.availableGeometry().center())
        self.move(win_geo.topLeft())

    # --- Construction ---
    def _createMenuBar(self):
        menu_bar = self.menuBar()
        file_menu = menu_bar.addMenu("File")
        for label, slot in (
            ("Import Video…", self._importVideo),
            ("Import SRT…", self._importSrt),
            ("Import Text…", self._importText),
            ("Export SRT…", self._exportSrt),
        ):
            action = QAction(label, self)
            action.triggered.connect(slot)
            file_menu.addAction(action)
        file_menu.addSeparator()
        exit_action = QAction("Exit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)
        settings_menu = menu_bar.addMenu("Settings")
        shortcuts_action = QAction("Shortcuts…", self)
        shortcuts_action.triggered.connect(self._showShortcutDialog)
        settings_menu.addAction(shortcuts_action)
        about_menu = menu_bar.addMenu("About")
        about_action = QAction("About Subdozer", self)
        about_action.triggered.connect(self._showAboutDialog)
        about_menu.addAction(about_action)

    def _createEditorLayout(self):
        splitter = QSplitter()
        splitter.setOrientation(Qt.Horizontal)  # type: ignore
        self.video_panel = VideoPanel(self, seek_step=self.settings.seek_step)
        self.video_controller = self.video_panel.controller
        self.dispatcher = KeybindingDispatcher(
            self.session, table=self.keybindings, settings=self.settings, parent=self
        )
        self.subtitle_list = SubtitleListWidget(
            self.session, self.dispatcher, rewind_preview=self.settings.rewind_preview
        )
        splitter.addWidget(self.video_panel)
        splitter.addWidget(self.subtitle_list)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)
        self.setCentralWidget(splitter)
        self.setStatusBar(QStatusBar())

        self.video_controller.timeUpdated.connect(self.session.on_time_update)
        self.video_controller.stateChanged.connect(self._onPlaybackState)
        self.video_controller.seeked.connect(self._syncAudioToSeek)
        self.video_controller.positionChanged.connect(self._maybeResyncAudio)
        self.subtitle_list.importRequested.connect(self._importSrt)
        self.subtitle_list.exportRequested.connect(self._exportSrt)

    def _createShortcutDialog(self):
        self.shortcut_dialog = QDialog(self)
        self.shortcut_dialog.setWindowTitle("Shortcuts")
        layout = QVBoxLayout()
        self.shortcut_settings = ShortcutSettingsWidget(self.keybindings, self.settings)
        layout.addWidget(self.shortcut_settings)
        self.shortcut_dialog.setLayout(layout)

    def _showShortcutDialog(self):
        self.shortcut_settings.refresh()
        self.shortcut_dialog.show()
        self.shortcut_dialog.raise_()

    def _showAboutDialog(self):
        QMessageBox.about(
            self,
            "About Subdozer",
            "Subdozer\nSubtitle timing editor synchronized to video playback.",
        )

    # --- Import / export ---
    def _importVideo(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Import Video", "", "Video Files (*.mp4 *.mov *.mkv *.avi *.webm)"
        )
        if file_path:
            self.loadMediaPath(file_path)

    def loadMediaPath(self, file_path: str):
        """Programmatic media load (used by _importVideo)."""
        try:
            self.video_panel.load(file_path)
        except (OSError, RuntimeError) as e:
            logger.exception("failed to load video %s", file_path)
            QMessageBox.critical(self, "Error", f"Failed to load video: {e}")
            return
        if hasattr(self, "media_player"):
            self.media_player.setSource(QUrl.fromLocalFile(file_path))
        self.statusBar().showMessage(f"Loaded {Path(file_path).name}")

    def _importSrt(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Import SRT", "", "Subtitles (*.srt);;Text (*.txt);;All Files (*)"
        )
        if file_path:
            self.loadCaptionsPath(file_path, CaptionFormat.SRT)

    def _importText(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Import Text", "", "Text (*.txt);;All Files (*)"
        )
        if file_path:
            self.loadCaptionsPath(file_path, CaptionFormat.TEXT)

    def loadCaptionsPath(self, file_path: str, fmt: CaptionFormat) -> bool:
        try:
            cues = read_captions(file_path, fmt, self.settings.seconds_per_line)
        except (OSError, UnicodeDecodeError) as e:
            logger.exception("failed to import %s", file_path)
            QMessageBox.critical(self, "Error", f"Failed to read {file_path}: {e}")
            return False
        self.session.replace(cues)
        self.statusBar().showMessage(f"Imported {len(cues)} cue(s)")
        return True

    def _exportSrt(self):
        if not self.session.cues:
            return
        file_path, _ = QFileDialog.getSaveFileName(
            self, "Export SRT", DEFAULT_EXPORT_NAME, "Subtitles (*.srt)"
        )
        if file_path:
            self.exportToPath(file_path)

    def exportToPath(self, file_path: str) -> bool:
        try:
            written = export_srt(self.session.cues, file_path)
        except OSError as e:
            logger.exception("failed to export %s", file_path)
            QMessageBox.critical(self, "Error", f"Failed to export: {e}")
            return False
        self.statusBar().showMessage(f"Exported {written.name}")
        return True

    # --- Audio ---
    def _initAudio(self):
        try:
            self.audio_output = QAudioOutput(self)
            self.media_player = QMediaPlayer(self)
            self.media_player.setAudioOutput(self.audio_output)
            self.audio_output.setVolume(0.8)
        except RuntimeError as e:
            logger.warning("audio init failed: %s", e)

    def _onPlaybackState(self, state: str):
        if not hasattr(self, "media_player"):
            return
        mp = self.media_player
        if not mp.source().isLocalFile():
            return
        if state == "playing":
            mp.setPosition(int(self.video_controller.position() * 1000))
            mp.play()
        else:
            mp.pause()

    def _syncAudioToSeek(self, t: float):
        if not hasattr(self, "media_player"):
            return
        mp = self.media_player
        if mp.source().isLocalFile():
            mp.setPosition(int(t * 1000))

    def _maybeResyncAudio(self, t: float):
        if not hasattr(self, "media_player"):
            return
        mp = self.media_player
        if mp.playbackState() != QMediaPlayer.PlaybackState.PlayingState:
            return
        video_ms = int(t * 1000)
        # Only push lagging audio forward; rewinding it repeats audible chunks.
        if video_ms - mp.position() > AUDIO_DRIFT_MS:
            mp.setPosition(video_ms)

    def closeEvent(self, event):  # type: ignore[override]
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self._key_filter)
        super().closeEvent(event)


def run():  # convenience launcher
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    window.centerOnPreferredScreen()
    sys.exit(app.exec())


__all__ = ["MainWindow", "run"]
