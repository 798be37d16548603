"""Frameless desktop sticky notes with a global show/hide hotkey."""

__version__ = "1.0.0"
