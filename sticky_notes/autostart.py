"""
Start the program at login.

Windows uses the per-user ``Run`` registry key, macOS a LaunchAgent and
everything else an XDG autostart entry. Failures are logged and ignored.
"""
import logging
import os
import plistlib
import sys
from pathlib import Path

log = logging.getLogger(__name__)

APP_NAME = "StickyNotes"
LAUNCH_AGENT_LABEL = "com.stickynotes.app"
RUN_KEY = r"Software\Microsoft\Windows\CurrentVersion\Run"


def launch_command():
    """Command line that starts the program again."""
    if getattr(sys, "frozen", False):
        return [sys.executable]
    return [sys.executable, "-m", "sticky_notes"]


def desktop_entry_path():
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home) / "autostart" / "sticky-notes.desktop"


def launch_agent_path():
    return Path.home() / "Library" / "LaunchAgents" / (LAUNCH_AGENT_LABEL + ".plist")


# --- Windows ---

def _set_windows(enable):
    import winreg
    key = winreg.OpenKey(winreg.HKEY_CURRENT_USER, RUN_KEY, 0, winreg.KEY_SET_VALUE)
    try:
        if enable:
            command = " ".join('"%s"' % part for part in launch_command())
            winreg.SetValueEx(key, APP_NAME, 0, winreg.REG_SZ, command)
        else:
            try:
                winreg.DeleteValue(key, APP_NAME)
            except FileNotFoundError:
                pass
    finally:
        winreg.CloseKey(key)


def _get_windows():
    import winreg
    key = winreg.OpenKey(winreg.HKEY_CURRENT_USER, RUN_KEY, 0, winreg.KEY_READ)
    try:
        winreg.QueryValueEx(key, APP_NAME)
        return True
    except FileNotFoundError:
        return False
    finally:
        winreg.CloseKey(key)


# --- macOS ---

def _set_mac(enable):
    path = launch_agent_path()
    if not enable:
        path.unlink(missing_ok=True)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        plistlib.dump({
            "Label": LAUNCH_AGENT_LABEL,
            "ProgramArguments": launch_command(),
            "RunAtLoad": True,
        }, f)


# --- XDG ---

def _set_xdg(enable):
    path = desktop_entry_path()
    if not enable:
        path.unlink(missing_ok=True)
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        "[Desktop Entry]\n"
        "Type=Application\n"
        "Name=Sticky Notes\n"
        "Exec=%s\n"
        "X-GNOME-Autostart-enabled=true\n" % " ".join(launch_command()),
        encoding="utf-8",
    )


def set_enabled(enable):
    try:
        if sys.platform == "win32":
            _set_windows(enable)
        elif sys.platform == "darwin":
            _set_mac(enable)
        else:
            _set_xdg(enable)
    except Exception as e:
        log.error("[AUTOSTART] Failed to set auto launch: %s", e)
        return False
    log.info("[AUTOSTART] Auto launch %s", "enabled" if enable else "disabled")
    return True


def is_enabled():
    try:
        if sys.platform == "win32":
            return _get_windows()
        if sys.platform == "darwin":
            return launch_agent_path().exists()
        return desktop_entry_path().exists()
    except Exception as e:
        log.error("[AUTOSTART] Failed to read auto launch state: %s", e)
        return False
