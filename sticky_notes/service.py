"""
Operations the note editor can call, bound onto a Bridge.
"""
import logging

from . import autostart
from .storage import DEFAULT_HOTKEY, clamp_font_size

log = logging.getLogger(__name__)


def claims_global_hotkey(note):
    return bool(note and note.get("hotkey") and note.get("isGlobalHotkey"))


class NotesService:
    def __init__(self, store, registrar, windows, autostart=autostart):
        self.store = store
        self.registrar = registrar
        self.windows = windows
        self.autostart = autostart

    def bind(self, bridge):
        # fire-and-forget
        bridge.on("window-minimize", self.windows.minimize)
        bridge.on("window-maximize", self.windows.toggle_maximize)
        bridge.on("window-close", self.windows.close)
        bridge.on("window-toggle-always-on-top", self.windows.toggle_always_on_top)
        bridge.on("window-set-opacity", self.windows.set_opacity)
        # request/response
        bridge.handle("get-notes", self.get_notes)
        bridge.handle("save-note", self.save_note)
        bridge.handle("delete-note", self.delete_note)
        bridge.handle("set-global-hotkey", self.set_global_hotkey)
        bridge.handle("get-global-hotkey", self.get_global_hotkey)
        bridge.handle("get-config", self.get_config)
        bridge.handle("set-font-size", self.set_font_size)
        bridge.handle("set-opacity", self.set_opacity)
        bridge.handle("set-auto-launch", self.set_auto_launch)
        bridge.handle("get-auto-launch", self.get_auto_launch)

    # --- notes ---

    def get_notes(self):
        return self.store.read_notes()

    def save_note(self, note):
        # a failed write is logged by the store; the editor keeps its copy
        self.store.save_note(note)
        if claims_global_hotkey(note):
            self.registrar.register(note["hotkey"])
        return True

    def delete_note(self, note_id):
        deleted, remaining, _ = self.store.delete_note(note_id)
        if claims_global_hotkey(deleted):
            # first remaining claimant in stored order, else the window hotkey
            successor = next((n for n in remaining if claims_global_hotkey(n)), None)
            if successor is not None:
                self.registrar.register(successor["hotkey"])
            else:
                self.registrar.register(self.store.read_config().get("hotkey"))
        return True

    # --- settings ---

    def set_global_hotkey(self, hotkey):
        self.registrar.register(hotkey)
        self.store.write_config({"hotkey": hotkey})
        return True

    def get_global_hotkey(self):
        return self.store.read_config().get("hotkey") or DEFAULT_HOTKEY

    def get_config(self):
        return self.store.read_config()

    def set_font_size(self, size):
        self.windows.set_font_size(clamp_font_size(size))
        return True

    def set_opacity(self, opacity):
        self.windows.set_opacity(opacity)
        return True

    def set_auto_launch(self, enable):
        self.autostart.set_enabled(bool(enable))
        self.store.write_config({"autoLaunch": bool(enable)})
        return True

    def get_auto_launch(self):
        return self.autostart.is_enabled()

    def register_configured_hotkey(self):
        """Bind the hotkey from the window configuration."""
        return self.registrar.register(self.store.read_config().get("hotkey"))
