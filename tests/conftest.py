import os

import pytest

from sticky_notes.hotkeys import HotkeyRegistrar
from sticky_notes.storage import NoteStore

# widget tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class FakeTimer:
    """Stands in for a single-shot QTimer."""

    def __init__(self):
        self.active = False
        self.starts = 0

    def start(self):
        self.active = True
        self.starts += 1

    def stop(self):
        self.active = False

    def isActive(self):
        return self.active


class FakeListener:
    def __init__(self, mapping):
        self.mapping = mapping
        self.started = False
        self.stopped = False

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True


class FakeWindow:
    def __init__(self, x=10, y=20, width=300, height=400, opacity=0.8):
        self.position = (x, y)
        self.size = (width, height)
        self.opacity = opacity
        self.visible = True
        self.minimized = False
        self.maximized = False
        self.on_top = False
        self.closed = False
        self.focused = False
        self.dead = False

    def _check(self):
        if self.dead:
            raise RuntimeError("wrapped C/C++ object has been deleted")

    def is_visible(self):
        self._check()
        return self.visible

    def is_minimized(self):
        self._check()
        return self.minimized

    def is_maximized(self):
        self._check()
        return self.maximized

    def get_position(self):
        self._check()
        return self.position

    def get_size(self):
        self._check()
        return self.size

    def get_opacity(self):
        self._check()
        return self.opacity

    def set_opacity(self, opacity):
        self._check()
        self.opacity = opacity

    def minimize(self):
        self._check()
        self.minimized = True

    def maximize(self):
        self._check()
        self.maximized = True

    def unmaximize(self):
        self._check()
        self.maximized = False

    def restore(self):
        self._check()
        self.minimized = False
        self.maximized = False

    def show(self):
        self._check()
        self.visible = True

    def hide(self):
        self._check()
        self.visible = False

    def focus(self):
        self._check()
        self.focused = True

    def close(self):
        self._check()
        self.closed = True

    def is_always_on_top(self):
        self._check()
        return self.on_top

    def set_always_on_top(self, on_top):
        self._check()
        self.on_top = on_top


class FakeAutostart:
    def __init__(self):
        self.enabled = False

    def set_enabled(self, enable):
        self.enabled = enable
        return True

    def is_enabled(self):
        return self.enabled


@pytest.fixture
def store(tmp_path):
    return NoteStore(tmp_path / "data")


@pytest.fixture
def listeners():
    return []


@pytest.fixture
def registrar(listeners):
    triggered = []

    def factory(mapping):
        listener = FakeListener(mapping)
        listeners.append(listener)
        return listener

    registrar = HotkeyRegistrar(lambda: triggered.append(True), listener_factory=factory)
    registrar.triggered = triggered
    return registrar


@pytest.fixture
def fake_timer():
    return FakeTimer()


@pytest.fixture
def fake_window():
    return FakeWindow()


@pytest.fixture
def fake_autostart():
    return FakeAutostart()
