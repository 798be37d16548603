import argparse
import logging
import os
import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication
from PyQt6.QtGui import QIcon
from PyQt6.QtCore import Qt, QObject, QStandardPaths, QTimer, pyqtSignal

# PIL for icon handling
from PIL import Image, ImageDraw

from .bridge import Bridge
from .hotkeys import HotkeyRegistrar
from .service import NotesService
from .storage import NoteStore
from .ui import StickyWindow
from .window import WindowController, WindowRegistry

log = logging.getLogger(__name__)

APP_NAME = "StickyNotes"
LOG_FILENAME = "sticky_notes.log"


def resource_path(relative_path):
    """ Get absolute path to resource, works for dev and for PyInstaller """
    base_path = getattr(sys, "_MEIPASS", os.path.abspath("."))
    return os.path.join(base_path, relative_path)


def default_data_dir():
    env = os.environ.get("STICKY_NOTES_DATA_DIR")
    if env:
        return Path(env)
    location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    return Path(location) if location else Path.home() / ".sticky_notes_qt"


def setup_logging(data_dir, debug=False):
    level_name = "DEBUG" if debug else os.environ.get("STICKY_NOTES_LOG_LEVEL", "INFO")
    level = getattr(logging, level_name.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(console)

    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(data_dir / LOG_FILENAME, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(file_handler)
    except OSError as e:
        log.warning("Could not open log file in %s: %s", data_dir, e)


def create_icon(data_dir):
    icon_path = Path(resource_path("icon.png"))
    if not icon_path.exists():
        icon_path = data_dir / "icon.png"
    if not icon_path.exists():
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
            img = Image.new("RGBA", (64, 64), color=(0, 0, 0, 0))
            d = ImageDraw.Draw(img)
            d.rounded_rectangle((4, 4, 60, 60), radius=10, fill=(255, 221, 87, 255))
            d.text((20, 24), "SN", fill=(40, 40, 40, 255))
            img.save(icon_path)
        except OSError as e:
            log.warning("Could not create icon: %s", e)
            return QIcon()
    return QIcon(str(icon_path))


class HotkeySignaler(QObject):
    """Helper class to emit Qt signals from the hotkey thread"""
    triggered = pyqtSignal()


class StickyNotesApp:
    def __init__(self, argv=None, data_dir=None):
        # --- Qt App Initialization ---
        self.app = QApplication.instance() or QApplication(argv or sys.argv)
        self.app.setApplicationName(APP_NAME)
        # closing the last window only quits outside macOS
        self.app.setQuitOnLastWindowClosed(sys.platform != "darwin")

        self.data_dir = Path(data_dir) if data_dir else default_data_dir()
        self.store = NoteStore(self.data_dir)
        self.app_icon = create_icon(self.data_dir)
        self.app.setWindowIcon(self.app_icon)

        self.bridge = Bridge(post=lambda fn: QTimer.singleShot(0, fn))
        self.windows = WindowController(self.store, WindowRegistry(), notify=self.bridge.emit)

        # --- Global Hotkey Setup ---
        self.hotkey_signaler = HotkeySignaler()
        self.hotkey_signaler.triggered.connect(self.windows.toggle_visibility)
        self.registrar = HotkeyRegistrar(self.hotkey_signaler.triggered.emit)

        self.service = NotesService(self.store, self.registrar, self.windows)
        self.service.bind(self.bridge)

        self.app.lastWindowClosed.connect(self.registrar.unregister_all)
        self.app.applicationStateChanged.connect(self.on_application_state)

    def create_window(self):
        def factory():
            window = StickyWindow(self.bridge, self.windows, self.windows.initial_geometry())
            window.setWindowIcon(self.app_icon)
            window.destroyed.connect(lambda *_: self.windows.on_closed())
            return window

        if self.windows.window is not None:
            return self.windows.window
        window = self.windows.registry.create(factory)
        window.show()
        self.service.register_configured_hotkey()
        return window

    def on_application_state(self, state):
        # macOS dock click with every window closed
        if state == Qt.ApplicationState.ApplicationActive and self.windows.window is None:
            log.info("Activated without a window, recreating it")
            self.create_window()

    def run(self):
        log.info("Sticky notes starting, data in %s", self.data_dir)
        self.create_window()
        return self.app.exec()


def main(argv=None):
    parser = argparse.ArgumentParser(prog="sticky-notes", description="Desktop sticky notes")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="directory holding notes.json and window-config.json")
    parser.add_argument("--debug", action="store_true", help="verbose console logging")
    args, qt_args = parser.parse_known_args(argv)

    app = StickyNotesApp([sys.argv[0]] + qt_args, data_dir=args.data_dir)
    setup_logging(app.data_dir, debug=args.debug)
    sys.exit(app.run())


if __name__ == "__main__":
    main()
