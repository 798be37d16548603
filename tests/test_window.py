"""Window controller tests against a fake window handle."""
from sticky_notes.window import ALWAYS_ON_TOP_CHANGED, WindowController, WindowRegistry


def build_controller(store, window=None):
    notifications = []
    controller = WindowController(store, WindowRegistry(),
                                  notify=lambda *args: notifications.append(args))
    if window is not None:
        controller.registry.create(lambda: window)
    return controller, notifications


def test_registry_holds_a_single_window(fake_window):
    registry = WindowRegistry()
    first = registry.create(lambda: fake_window)
    second = registry.create(lambda: object())
    assert first is second is fake_window
    registry.destroy()
    assert registry.current is None


def test_move_and_resize_persist_geometry(store, fake_window):
    controller, _ = build_controller(store, fake_window)
    fake_window.position = (120, 80)
    fake_window.size = (320, 260)
    controller.capture_geometry()

    config = store.read_config()
    assert (config["x"], config["y"]) == (120, 80)
    assert (config["width"], config["height"]) == (320, 260)
    assert config["opacity"] == 0.8
    assert config["hotkey"] == "CommandOrControl+\\"


def test_geometry_is_not_captured_while_minimized_or_maximized(store, fake_window):
    controller, _ = build_controller(store, fake_window)
    fake_window.position = (1, 2)
    fake_window.minimized = True
    controller.capture_geometry()
    fake_window.minimized = False
    fake_window.maximized = True
    controller.capture_geometry()
    assert store.read_config()["x"] is None


def test_close_always_persists_geometry(store, fake_window):
    controller, _ = build_controller(store, fake_window)
    fake_window.maximized = True
    fake_window.size = (900, 700)
    controller.on_close()
    assert store.read_config()["width"] == 900


def test_dead_handle_is_ignored(store, fake_window):
    controller, notifications = build_controller(store, fake_window)
    fake_window.dead = True
    controller.on_close()
    controller.capture_geometry()
    controller.minimize()
    controller.toggle_maximize()
    controller.toggle_visibility()
    assert controller.toggle_always_on_top() is None
    assert notifications == []
    assert not store.config_file.exists()


def test_operations_without_window_are_noops(store):
    controller, notifications = build_controller(store)
    controller.minimize()
    controller.close()
    controller.capture_geometry()
    controller.toggle_visibility()
    assert controller.toggle_always_on_top() is None
    assert notifications == []


def test_toggle_maximize(store, fake_window):
    controller, _ = build_controller(store, fake_window)
    controller.toggle_maximize()
    assert fake_window.maximized
    controller.toggle_maximize()
    assert not fake_window.maximized


def test_toggle_always_on_top_notifies(store, fake_window):
    controller, notifications = build_controller(store, fake_window)
    assert controller.toggle_always_on_top() is True
    assert controller.toggle_always_on_top() is False
    assert notifications == [(ALWAYS_ON_TOP_CHANGED, True), (ALWAYS_ON_TOP_CHANGED, False)]


def test_set_opacity_clamps_applies_and_persists(store, fake_window):
    controller, _ = build_controller(store, fake_window)
    assert controller.set_opacity(5.0) == 1.0
    assert fake_window.opacity == 1.0
    assert store.read_config()["opacity"] == 1.0
    controller.set_opacity(0.1)
    assert store.read_config()["opacity"] == 0.3


def test_set_font_size_clamps_and_persists(store):
    controller, _ = build_controller(store)
    assert controller.set_font_size(1) == 12
    assert store.read_config()["fontSize"] == 12
    controller.set_font_size(30)
    assert store.read_config()["fontSize"] == 24


def test_toggle_visibility(store, fake_window):
    controller, _ = build_controller(store, fake_window)
    controller.toggle_visibility()
    assert fake_window.visible is False

    fake_window.minimized = True
    controller.toggle_visibility()
    assert fake_window.visible is True
    assert fake_window.minimized is False
    assert fake_window.focused is True


def test_initial_geometry_comes_from_config(store):
    store.write_config({"x": 50, "y": 60, "width": 250, "opacity": 0.5})
    controller, _ = build_controller(store)
    assert controller.initial_geometry() == {
        "x": 50, "y": 60, "width": 250, "height": 400, "opacity": 0.5,
    }


def test_on_closed_forgets_the_window(store, fake_window):
    controller, _ = build_controller(store, fake_window)
    controller.on_closed()
    assert controller.window is None
