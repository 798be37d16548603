"""
The sticky-notes window: a frameless, translucent widget with a title bar,
a row of note tabs, the editor and a small footer.

Everything the window does to notes and settings goes through the Bridge.
Native window events (move, resize, close) are reported to the
WindowController, for which this widget also acts as the window handle.
"""
import logging

from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QLabel,
                             QFrame, QSlider, QSpinBox, QCheckBox, QTabBar,
                             QPlainTextEdit, QSizeGrip)
from PyQt6.QtGui import QFont
from PyQt6.QtCore import Qt, QTimer

from .editor import AUTOSAVE_DELAY_MS, NoteEditorModel, note_caption
from .hotkeys import HotkeyRecorder, format_hotkey
from .window import ALWAYS_ON_TOP_CHANGED
from .storage import MIN_WIDTH, MIN_HEIGHT, MIN_FONT_SIZE, MAX_FONT_SIZE

log = logging.getLogger(__name__)

# Qt key -> name understood by the hotkey grammar
NAMED_QT_KEYS = {
    Qt.Key.Key_Space: "Space",
    Qt.Key.Key_Tab: "Tab",
    Qt.Key.Key_Return: "Enter",
    Qt.Key.Key_Enter: "Enter",
    Qt.Key.Key_Escape: "Escape",
    Qt.Key.Key_Backspace: "Backspace",
    Qt.Key.Key_Delete: "Delete",
    Qt.Key.Key_Insert: "Insert",
    Qt.Key.Key_Home: "Home",
    Qt.Key.Key_End: "End",
    Qt.Key.Key_PageUp: "PageUp",
    Qt.Key.Key_PageDown: "PageDown",
    Qt.Key.Key_Up: "Up",
    Qt.Key.Key_Down: "Down",
    Qt.Key.Key_Left: "Left",
    Qt.Key.Key_Right: "Right",
}
MODIFIER_QT_KEYS = {
    Qt.Key.Key_Control: "Control",
    Qt.Key.Key_Shift: "Shift",
    Qt.Key.Key_Alt: "Alt",
    Qt.Key.Key_Meta: "Meta",
    Qt.Key.Key_Super_L: "Super",
    Qt.Key.Key_Super_R: "Super",
}


def key_event_name(key):
    """Name of a Qt key for the hotkey recorder, or None."""
    if 0x20 < key < 0x7F:
        return chr(key).upper()
    if Qt.Key.Key_F1.value <= key <= Qt.Key.Key_F24.value:
        return "F%d" % (key - Qt.Key.Key_F1.value + 1)
    for table in (NAMED_QT_KEYS, MODIFIER_QT_KEYS):
        for qt_key, name in table.items():
            if qt_key.value == key:
                return name
    return None


def event_modifiers(event):
    mods = event.modifiers()
    held = set()
    if mods & Qt.KeyboardModifier.ControlModifier:
        held.add("ctrl")
    if mods & Qt.KeyboardModifier.MetaModifier:
        held.add("meta")
    if mods & Qt.KeyboardModifier.ShiftModifier:
        held.add("shift")
    if mods & Qt.KeyboardModifier.AltModifier:
        held.add("alt")
    return held


def tab_caption(note):
    caption = note_caption(note)
    if note.get("hotkey"):
        caption += " " + format_hotkey(note["hotkey"])
    return caption


class StickyWindow(QWidget):
    def __init__(self, bridge, controller, geometry):
        super().__init__()
        self.bridge = bridge
        self.controller = controller
        self.recorder = HotkeyRecorder()
        self._drag_pos = None
        self._loading = False

        self.autosave_timer = QTimer(self)
        self.autosave_timer.setSingleShot(True)
        self.autosave_timer.setInterval(AUTOSAVE_DELAY_MS)
        self.model = NoteEditorModel(bridge, self.autosave_timer)
        self.autosave_timer.timeout.connect(self.model.save_active)

        # --- Window Setup ---
        self.setWindowTitle("Sticky Notes")
        self.setWindowFlags(Qt.WindowType.FramelessWindowHint | Qt.WindowType.Window)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)
        self.setMinimumSize(MIN_WIDTH, MIN_HEIGHT)
        self.resize(geometry["width"], geometry["height"])
        if geometry.get("x") is not None and geometry.get("y") is not None:
            self.move(geometry["x"], geometry["y"])
        self.setWindowOpacity(geometry["opacity"])

        self.init_ui()
        self.apply_styles()
        self.bridge.subscribe(ALWAYS_ON_TOP_CHANGED, self.update_pin_state)

        self.model.load()
        self.apply_config(self.model.config)
        self.refresh_tabs()
        self.show_active_note()

    def init_ui(self):
        self.main_layout = QVBoxLayout(self)
        self.main_layout.setContentsMargins(0, 0, 0, 0)
        self.main_layout.setSpacing(0)

        self.body = QFrame()
        self.body.setObjectName("body")
        body_layout = QVBoxLayout(self.body)
        body_layout.setContentsMargins(6, 4, 6, 2)
        body_layout.setSpacing(4)
        self.main_layout.addWidget(self.body)

        # Title bar (drag area)
        self.title_bar = QFrame()
        self.title_bar.setObjectName("title_bar")
        title_layout = QHBoxLayout(self.title_bar)
        title_layout.setContentsMargins(2, 0, 0, 0)
        self.hotkey_label = QLabel("")
        self.hotkey_label.setObjectName("muted")
        title_layout.addWidget(self.hotkey_label)
        title_layout.addStretch()
        for text, tip, channel in (("−", "Minimize", "window-minimize"),
                                   ("□", "Maximize", "window-maximize"),
                                   ("×", "Close", "window-close")):
            button = QPushButton(text)
            button.setToolTip(tip)
            button.clicked.connect(lambda _=False, c=channel: self.bridge.send(c))
            title_layout.addWidget(button)
        body_layout.addWidget(self.title_bar)

        # Settings panel
        self.settings_panel = QFrame()
        self.settings_panel.setObjectName("settings")
        settings_layout = QVBoxLayout(self.settings_panel)
        settings_layout.setContentsMargins(4, 4, 4, 4)

        self.opacity_label = QLabel()
        self.opacity_slider = QSlider(Qt.Orientation.Horizontal)
        self.opacity_slider.setRange(30, 100)  # From 0.3 to 1.0
        self.opacity_slider.setSingleStep(5)
        settings_layout.addWidget(self.opacity_label)
        settings_layout.addWidget(self.opacity_slider)

        hotkey_row = QHBoxLayout()
        hotkey_row.addWidget(QLabel("Hotkey"))
        self.hotkey_button = QPushButton()
        self.hotkey_button.setCheckable(True)
        hotkey_row.addWidget(self.hotkey_button)
        settings_layout.addLayout(hotkey_row)

        font_row = QHBoxLayout()
        font_row.addWidget(QLabel("Font size"))
        self.font_spin = QSpinBox()
        self.font_spin.setRange(MIN_FONT_SIZE, MAX_FONT_SIZE)
        font_row.addWidget(self.font_spin)
        settings_layout.addLayout(font_row)

        self.autolaunch_box = QCheckBox("Launch at login")
        settings_layout.addWidget(self.autolaunch_box)

        self.settings_panel.hide()
        body_layout.addWidget(self.settings_panel)

        # Note tabs
        tabs_row = QHBoxLayout()
        self.tabs = QTabBar()
        self.tabs.setExpanding(False)
        self.tabs.setDrawBase(False)
        tabs_row.addWidget(self.tabs, 1)
        self.new_tab_button = QPushButton("+")
        self.new_tab_button.setToolTip("New note")
        tabs_row.addWidget(self.new_tab_button)
        body_layout.addLayout(tabs_row)

        # Text Editor
        self.text_edit = QPlainTextEdit()
        self.text_edit.setPlaceholderText("Type a note...")
        body_layout.addWidget(self.text_edit, 1)

        # Footer
        footer = QHBoxLayout()
        self.settings_button = QPushButton("⚙")
        self.settings_button.setCheckable(True)
        self.pin_button = QPushButton("📌")
        self.pin_button.setCheckable(True)
        self.pin_button.setToolTip("Always on top")
        self.count_label = QLabel("")
        self.count_label.setObjectName("muted")
        self.delete_button = QPushButton("×")
        self.delete_button.setToolTip("Delete note")
        self.new_button = QPushButton("+ New")
        footer.addWidget(self.settings_button)
        footer.addWidget(self.pin_button)
        footer.addStretch()
        footer.addWidget(self.count_label)
        footer.addStretch()
        footer.addWidget(self.delete_button)
        footer.addWidget(self.new_button)
        footer.addWidget(QSizeGrip(self), 0, Qt.AlignmentFlag.AlignBottom | Qt.AlignmentFlag.AlignRight)
        body_layout.addLayout(footer)

        # --- Connections ---
        self.text_edit.textChanged.connect(self.on_text_changed)
        self.tabs.currentChanged.connect(self.on_tab_changed)
        self.new_tab_button.clicked.connect(self.create_note)
        self.new_button.clicked.connect(self.create_note)
        self.delete_button.clicked.connect(self.delete_active_note)
        self.settings_button.toggled.connect(self.settings_panel.setVisible)
        self.pin_button.clicked.connect(self.toggle_pinned)
        self.opacity_slider.valueChanged.connect(self.update_transparency)
        self.hotkey_button.clicked.connect(self.start_recording)
        self.font_spin.valueChanged.connect(self.update_font_size)
        self.autolaunch_box.toggled.connect(self.update_auto_launch)

    def apply_styles(self):
        self.setStyleSheet("""
            #body { background-color: rgba(0, 0, 0, 200); border-radius: 6px; }
            QWidget { color: #f0f0f0; }
            QLabel, QPushButton, QCheckBox, QSpinBox, QTabBar { font-size: 12px; }
            #muted { color: #9a9a9a; font-size: 11px; }
            #settings { background-color: rgba(255, 255, 255, 20); border-radius: 4px; }
            QPlainTextEdit { background: transparent; border: none; }
            QPushButton {
                background-color: transparent;
                border: none;
                border-radius: 3px;
                padding: 2px 6px;
                color: #9a9a9a;
            }
            QPushButton:hover { background-color: rgba(255, 255, 255, 25); color: white; }
            QPushButton:checked { background-color: rgba(255, 255, 255, 40); color: white; }
            QTabBar::tab { background: transparent; color: #9a9a9a; padding: 2px 6px; }
            QTabBar::tab:selected { background: rgba(255, 255, 255, 25); color: white; }
        """)

    # --- loading ---

    def apply_config(self, config):
        self._loading = True
        opacity = config.get("opacity") or 0.8
        self.opacity_slider.setValue(round(opacity * 100))
        self.opacity_label.setText("Opacity: %d%%" % round(opacity * 100))
        self.font_spin.setValue(config.get("fontSize") or 14)
        self.set_editor_font(self.font_spin.value())
        self.autolaunch_box.setChecked(bool(self.bridge.invoke("get-auto-launch")))
        self.show_hotkey(self.bridge.invoke("get-global-hotkey"))
        self._loading = False

    def show_hotkey(self, hotkey):
        text = format_hotkey(hotkey)
        self.hotkey_label.setText(text)
        self.hotkey_button.setText(text or "None")

    def refresh_tabs(self):
        self.tabs.blockSignals(True)
        while self.tabs.count():
            self.tabs.removeTab(0)
        for note in self.model.notes:
            index = self.tabs.addTab(tab_caption(note))
            self.tabs.setTabData(index, note["id"])
            if note["id"] == self.model.active_id:
                self.tabs.setCurrentIndex(index)
        self.tabs.blockSignals(False)

        count = len(self.model.notes)
        self.count_label.setText("%d notes" % count if count > 1 else "")
        self.delete_button.setVisible(self.model.can_delete)
        self.new_button.setVisible(not self.model.can_delete)

    def show_active_note(self):
        note = self.model.active_note
        self._loading = True
        self.text_edit.setPlainText(note.get("content", "") if note else "")
        self._loading = False

    # --- editing ---

    def on_text_changed(self):
        if self._loading:
            return
        self.model.edit_content(self.text_edit.toPlainText())
        index = self.tabs.currentIndex()
        if index >= 0 and self.model.active_note is not None:
            self.tabs.setTabText(index, tab_caption(self.model.active_note))

    def on_tab_changed(self, index):
        if index < 0:
            return
        self.model.select(self.tabs.tabData(index))
        self.show_active_note()

    def create_note(self):
        self.model.create_note()
        self.refresh_tabs()
        self.show_active_note()
        self.text_edit.setFocus()

    def delete_active_note(self):
        if self.model.delete_note(self.model.active_id):
            self.refresh_tabs()
            self.show_active_note()

    # --- settings ---

    def toggle_pinned(self):
        # the checked state follows the always-on-top notification
        self.pin_button.setChecked(not self.pin_button.isChecked())
        self.bridge.send("window-toggle-always-on-top")

    def update_pin_state(self, pinned):
        self.pin_button.setChecked(pinned)

    def update_transparency(self, value):
        self.opacity_label.setText("Opacity: %d%%" % value)
        if not self._loading:
            self.bridge.invoke("set-opacity", value / 100.0)

    def set_editor_font(self, size):
        font = QFont(self.text_edit.font())
        font.setPointSize(size)
        self.text_edit.setFont(font)

    def update_font_size(self, size):
        self.set_editor_font(size)
        if not self._loading:
            self.bridge.invoke("set-font-size", size)

    def update_auto_launch(self, checked):
        if not self._loading:
            self.bridge.invoke("set-auto-launch", checked)

    # --- hotkey recording ---

    def start_recording(self):
        self.recorder.start()
        self.hotkey_button.setChecked(True)
        self.hotkey_button.setText("Press keys...")
        self.grabKeyboard()

    def finish_recording(self):
        self.releaseKeyboard()
        self.hotkey_button.setChecked(False)
        combo = self.recorder.key_up()
        if combo:
            self.bridge.invoke("set-global-hotkey", combo)
        self.show_hotkey(self.bridge.invoke("get-global-hotkey"))

    def keyPressEvent(self, event):
        if self.recorder.recording:
            combo = self.recorder.key_down(event_modifiers(event), key_event_name(event.key()))
            self.hotkey_button.setText(format_hotkey(combo) or "Press keys...")
            event.accept()
            return
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event):
        if self.recorder.recording:
            event.accept()
            self.finish_recording()
            return
        super().keyReleaseEvent(event)

    # --- drag behavior (title bar) ---

    def mousePressEvent(self, event):
        if (event.button() == Qt.MouseButton.LeftButton
                and self.title_bar.geometry().contains(event.position().toPoint())):
            self._drag_pos = event.globalPosition().toPoint() - self.frameGeometry().topLeft()
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if self._drag_pos is not None and event.buttons() & Qt.MouseButton.LeftButton:
            self.move(event.globalPosition().toPoint() - self._drag_pos)
            event.accept()
        else:
            super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        self._drag_pos = None
        super().mouseReleaseEvent(event)

    # --- native window events ---

    def moveEvent(self, event):
        super().moveEvent(event)
        self.controller.capture_geometry()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.controller.capture_geometry()

    def closeEvent(self, event):
        if self.autosave_timer.isActive():
            self.model.flush()
        self.bridge.unsubscribe(ALWAYS_ON_TOP_CHANGED, self.update_pin_state)
        self.controller.on_close()
        super().closeEvent(event)

    # --- window handle ---

    def is_visible(self):
        # Qt counts a minimized window as visible
        return self.isVisible() and not self.isMinimized()

    def is_minimized(self):
        return self.isMinimized()

    def is_maximized(self):
        return self.isMaximized()

    def get_position(self):
        return self.x(), self.y()

    def get_size(self):
        return self.width(), self.height()

    def get_opacity(self):
        return round(self.windowOpacity(), 2)

    def set_opacity(self, opacity):
        self.setWindowOpacity(opacity)

    def minimize(self):
        self.showMinimized()

    def maximize(self):
        self.showMaximized()

    def unmaximize(self):
        self.showNormal()

    def restore(self):
        self.showNormal()

    def focus(self):
        self.raise_()
        self.activateWindow()

    def is_always_on_top(self):
        return bool(self.windowFlags() & Qt.WindowType.WindowStaysOnTopHint)

    def set_always_on_top(self, on_top):
        self.setWindowFlag(Qt.WindowType.WindowStaysOnTopHint, on_top)
        self.show()  # Re-show to apply window flag change
