"""
State behind the note editor widget.

All persistence goes through the bridge. The autosave timer is anything
with ``start()``, ``stop()`` and ``isActive()`` where ``start()`` restarts a
running timer
(a single-shot QTimer in the application); its timeout must call
``save_active``.
"""
import logging
import random
import string
import time

log = logging.getLogger(__name__)

AUTOSAVE_DELAY_MS = 500

_DIGITS = string.digits + string.ascii_lowercase


def _base36(number):
    out = ""
    while True:
        number, rem = divmod(number, 36)
        out = _DIGITS[rem] + out
        if not number:
            return out


def generate_id():
    """Millisecond clock in base 36 plus a random suffix."""
    suffix = "".join(random.choice(_DIGITS) for _ in range(8))
    return _base36(int(time.time() * 1000)) + suffix


def note_caption(note):
    """Short tab label for a note."""
    content = (note.get("content") or "")[:8].replace("\n", " ")
    return content if content.strip() else "..."


class NoteEditorModel:
    def __init__(self, bridge, autosave_timer):
        self.bridge = bridge
        self.autosave_timer = autosave_timer
        self.notes = []
        self.active_id = None
        self.config = {}

    @property
    def active_note(self):
        return next((n for n in self.notes if n.get("id") == self.active_id), None)

    @property
    def can_delete(self):
        return len(self.notes) > 1

    def load(self):
        self.load_notes()
        self.config = self.bridge.invoke("get-config") or {}

    def load_notes(self):
        notes = self.bridge.invoke("get-notes")
        if not notes:
            return
        self.notes = notes
        if not self.active_id or self.active_note is None:
            self.active_id = notes[0]["id"]

    def select(self, note_id):
        if note_id == self.active_id:
            return
        if any(n.get("id") == note_id for n in self.notes):
            if self.autosave_timer.isActive():
                self.flush()
            self.active_id = note_id

    def edit_content(self, content):
        """Change the active note in memory and (re)arm the autosave."""
        note = self.active_note
        if note is None:
            return
        note["content"] = content
        self.autosave_timer.start()

    def save_active(self):
        note = self.active_note
        if note is None:
            return False
        log.debug("[EDITOR] Saving note %s", note["id"])
        return self.bridge.invoke("save-note", dict(note))

    def flush(self):
        """Save right away if an autosave is pending."""
        self.autosave_timer.stop()
        self.save_active()

    def create_note(self):
        if self.autosave_timer.isActive():
            self.flush()
        note = {"id": generate_id(), "content": ""}
        self.bridge.invoke("save-note", note)
        self.load_notes()
        self.select(note["id"])
        return note["id"]

    def delete_note(self, note_id):
        if not self.can_delete:
            return False
        if self.autosave_timer.isActive():
            if note_id == self.active_id:
                self.autosave_timer.stop()
            else:
                self.flush()
        self.bridge.invoke("delete-note", note_id)
        self.load_notes()
        return True
