"""
JSON persistence for the window configuration and the note collection.

Both documents live in one data directory and are rewritten in full on
every save. Reads never raise: a missing or damaged file yields defaults.
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

log = logging.getLogger(__name__)

CONFIG_FILENAME = "window-config.json"
NOTES_FILENAME = "notes.json"

DEFAULT_HOTKEY = "CommandOrControl+\\"
DEFAULT_NOTE_ID = "default"

MIN_WIDTH = 200
MIN_HEIGHT = 150
MIN_OPACITY = 0.3
MAX_OPACITY = 1.0
MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 24

DEFAULT_CONFIG = {
    "x": None,
    "y": None,
    "width": 300,
    "height": 400,
    "hotkey": DEFAULT_HOTKEY,
    "opacity": 0.8,
    "fontSize": 14,
    "autoLaunch": False,
}


def clamp_opacity(value):
    return max(MIN_OPACITY, min(MAX_OPACITY, float(value)))


def clamp_font_size(value):
    return max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, int(value)))


def timestamp():
    """Current UTC time as an ISO string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_note():
    now = timestamp()
    return {
        "id": DEFAULT_NOTE_ID,
        "content": "",
        "hotkey": "",
        "createdAt": now,
        "updatedAt": now,
    }


def normalize_config(config):
    """Clamp and coerce every setting into its allowed range and type."""
    config = dict(config)
    try:
        config["opacity"] = clamp_opacity(config.get("opacity", DEFAULT_CONFIG["opacity"]))
    except (TypeError, ValueError, OverflowError):
        config["opacity"] = DEFAULT_CONFIG["opacity"]
    try:
        config["fontSize"] = clamp_font_size(config.get("fontSize", DEFAULT_CONFIG["fontSize"]))
    except (TypeError, ValueError, OverflowError):
        config["fontSize"] = DEFAULT_CONFIG["fontSize"]
    for key, minimum in (("width", MIN_WIDTH), ("height", MIN_HEIGHT)):
        try:
            config[key] = max(minimum, int(config.get(key) or DEFAULT_CONFIG[key]))
        except (TypeError, ValueError, OverflowError):
            config[key] = DEFAULT_CONFIG[key]
    for key in ("x", "y"):
        try:
            config[key] = None if config.get(key) is None else int(float(config[key]))
        except (TypeError, ValueError, OverflowError):
            config[key] = None
    if not isinstance(config.get("hotkey"), str):
        config["hotkey"] = DEFAULT_CONFIG["hotkey"]
    config["autoLaunch"] = bool(config.get("autoLaunch"))
    return config


class NoteStore:
    """Owner of window-config.json and notes.json.

    Writers always read the current document, change it in memory and write
    the whole thing back. There is no locking, so the last writer wins; every
    caller runs on the GUI thread.
    """

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)
        self.config_file = self.data_dir / CONFIG_FILENAME
        self.notes_file = self.data_dir / NOTES_FILENAME

    # --- low level ---

    def _load(self, path):
        if not path.exists():
            log.debug("[LOAD] %s does not exist", path.name)
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            log.warning("[LOAD] Failed to read %s: %s", path.name, e)
            return None

    def _dump(self, path, data):
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    # --- window configuration ---

    def read_config(self):
        config = dict(DEFAULT_CONFIG)
        data = self._load(self.config_file)
        if isinstance(data, dict):
            config.update(data)
        elif data is not None:
            log.warning("[LOAD] %s is not an object, using defaults", self.config_file.name)
        return normalize_config(config)

    def write_config(self, partial):
        """Merge ``partial`` into the stored configuration."""
        config = self.read_config()
        config.update(partial)
        config = normalize_config(config)
        # an unknown position is left out rather than written as null
        document = {k: v for k, v in config.items() if not (k in ("x", "y") and v is None)}
        try:
            self._dump(self.config_file, document)
        except (OSError, TypeError, ValueError) as e:
            log.error("[SAVE_CONFIG] Failed to save window config: %s", e)

    # --- notes ---

    def read_notes(self):
        data = self._load(self.notes_file)
        if isinstance(data, list):
            notes = [n for n in data if isinstance(n, dict) and "id" in n]
            if notes:
                return notes
        elif data is not None:
            log.warning("[LOAD] %s is not a list, using defaults", self.notes_file.name)
        return [default_note()]

    def write_notes(self, notes):
        log.debug("[SAVE_NOTES] Saving %d notes", len(notes))
        try:
            self._dump(self.notes_file, list(notes))
        except (OSError, TypeError, ValueError) as e:
            log.error("[SAVE_NOTES] Failed to save notes: %s", e)
            return False
        return True

    def save_note(self, note):
        """Update the note with the same id in place, or append it."""
        notes = self.read_notes()
        fields = {k: v for k, v in note.items() if k not in ("createdAt", "updatedAt")}
        now = timestamp()
        for index, existing in enumerate(notes):
            if existing.get("id") == note["id"]:
                merged = dict(existing)
                merged.update(fields)
                # Never step backwards if the clock did.
                merged["updatedAt"] = max(now, str(existing.get("updatedAt") or ""))
                merged.setdefault("createdAt", now)
                notes[index] = merged
                break
        else:
            new_note = dict(fields)
            new_note["createdAt"] = now
            new_note["updatedAt"] = now
            notes.append(new_note)
        return self.write_notes(notes)

    def delete_note(self, note_id):
        """Remove a note by id.

        Returns ``(deleted, remaining, ok)`` where ``deleted`` is the removed
        note (or None) and ``remaining`` is the collection as written.
        """
        notes = self.read_notes()
        deleted = next((n for n in notes if n.get("id") == note_id), None)
        remaining = [n for n in notes if n.get("id") != note_id]
        if not remaining:
            remaining.append(default_note())
        ok = self.write_notes(remaining)
        return deleted, remaining, ok
