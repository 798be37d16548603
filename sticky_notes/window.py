"""
Window controller for the single sticky-notes window.

The controller never touches Qt directly. It drives a *handle*: any object
exposing ``is_visible``, ``is_minimized``, ``is_maximized``, ``get_position``,
``get_size``, ``get_opacity``, ``set_opacity``, ``minimize``, ``maximize``,
``unmaximize``, ``restore``, ``show``, ``hide``, ``focus``, ``close``,
``is_always_on_top`` and ``set_always_on_top``. The Qt window implements it
in ``sticky_notes.ui``; tests use a fake.

A handle whose native window is already gone raises RuntimeError, which is
ignored at every call site.
"""
import logging

from .storage import clamp_font_size, clamp_opacity

log = logging.getLogger(__name__)

ALWAYS_ON_TOP_CHANGED = "always-on-top-changed"


class WindowRegistry:
    """Holds the one window of the process."""

    def __init__(self):
        self.current = None

    def create(self, factory):
        if self.current is None:
            self.current = factory()
            log.debug("[WINDOW] Created window")
        return self.current

    def destroy(self):
        self.current = None
        log.debug("[WINDOW] Window destroyed")


class WindowController:
    def __init__(self, store, registry=None, notify=None):
        self.store = store
        self.registry = registry or WindowRegistry()
        self.notify = notify

    @property
    def window(self):
        return self.registry.current

    def initial_geometry(self):
        """Position, size and opacity to create the window with."""
        config = self.store.read_config()
        return {
            "x": config.get("x"),
            "y": config.get("y"),
            "width": config["width"],
            "height": config["height"],
            "opacity": config.get("opacity") or 1.0,
        }

    # --- chrome controls ---

    def minimize(self):
        if self.window is not None:
            try:
                self.window.minimize()
            except RuntimeError:
                pass

    def toggle_maximize(self):
        win = self.window
        if win is None:
            return
        try:
            if win.is_maximized():
                win.unmaximize()
            else:
                win.maximize()
        except RuntimeError:
            pass

    def close(self):
        if self.window is not None:
            try:
                self.window.close()
            except RuntimeError:
                pass

    def toggle_always_on_top(self):
        win = self.window
        if win is None:
            return None
        try:
            on_top = not win.is_always_on_top()
            win.set_always_on_top(on_top)
        except RuntimeError:
            return None
        if self.notify is not None:
            self.notify(ALWAYS_ON_TOP_CHANGED, on_top)
        return on_top

    def set_opacity(self, value):
        opacity = clamp_opacity(value)
        if self.window is not None:
            try:
                self.window.set_opacity(opacity)
            except RuntimeError:
                pass
        self.store.write_config({"opacity": opacity})
        return opacity

    def set_font_size(self, value):
        size = clamp_font_size(value)
        self.store.write_config({"fontSize": size})
        return size

    def toggle_visibility(self):
        """Global hotkey action."""
        win = self.window
        if win is None:
            return
        try:
            if win.is_visible():
                win.hide()
            else:
                if win.is_minimized():
                    win.restore()
                win.focus()
                win.show()
        except RuntimeError:
            pass

    # --- geometry ---

    def _geometry(self, win):
        x, y = win.get_position()
        width, height = win.get_size()
        return {"x": x, "y": y, "width": width, "height": height,
                "opacity": win.get_opacity()}

    def capture_geometry(self):
        """Persist geometry after a move or resize of a normal window."""
        win = self.window
        if win is None:
            return
        try:
            if win.is_minimized() or win.is_maximized():
                return
            geometry = self._geometry(win)
        except RuntimeError:
            return
        self.store.write_config(geometry)

    def on_close(self):
        """Persist geometry one last time, whatever the window state."""
        win = self.window
        if win is None:
            return
        try:
            geometry = self._geometry(win)
        except RuntimeError:
            return
        self.store.write_config(geometry)

    def on_closed(self):
        self.registry.destroy()
