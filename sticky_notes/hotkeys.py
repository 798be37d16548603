"""
Global hotkeys.

Combinations are stored in the accelerator form used by the config file,
e.g. ``CommandOrControl+Shift+N``, and handed to pynput in its own
``<ctrl>+<shift>+n`` form when registered.
"""
import logging
import sys

log = logging.getLogger(__name__)

IS_MAC = sys.platform == "darwin"

# canonical modifier -> accepted spellings (lower case)
MODIFIER_ALIASES = {
    "CommandOrControl": ("commandorcontrol", "cmdorctrl"),
    "Control": ("control", "ctrl"),
    "Command": ("command", "cmd"),
    "Shift": ("shift",),
    "Alt": ("alt", "option"),
    "Super": ("super", "meta", "win"),
}
MODIFIER_ORDER = ["CommandOrControl", "Control", "Command", "Alt", "Shift", "Super"]

_MODIFIER_LOOKUP = {
    alias: name for name, aliases in MODIFIER_ALIASES.items() for alias in aliases
}

# named key (lower case) -> pynput key name
NAMED_KEYS = {
    "space": "space",
    "tab": "tab",
    "enter": "enter",
    "return": "enter",
    "escape": "esc",
    "esc": "esc",
    "backspace": "backspace",
    "delete": "delete",
    "insert": "insert",
    "home": "home",
    "end": "end",
    "pageup": "page_up",
    "pagedown": "page_down",
    "up": "up",
    "down": "down",
    "left": "left",
    "right": "right",
    "arrowup": "up",
    "arrowdown": "down",
    "arrowleft": "left",
    "arrowright": "right",
}
NAMED_KEYS.update({"f%d" % i: "f%d" % i for i in range(1, 25)})

DISPLAY_NAMES = {
    "CommandOrControl": "Ctrl",
    "CmdOrCtrl": "Ctrl",
    "Option": "Alt",
    "Super": "Win",
}


class HotkeyError(ValueError):
    pass


class Accelerator:
    """A parsed key combination: a set of modifiers plus one key."""

    def __init__(self, modifiers, key):
        self.modifiers = frozenset(modifiers)
        self.key = key

    def __eq__(self, other):
        return (isinstance(other, Accelerator)
                and self.modifiers == other.modifiers and self.key == other.key)

    def __hash__(self):
        return hash((self.modifiers, self.key))

    def __str__(self):
        parts = [m for m in MODIFIER_ORDER if m in self.modifiers]
        return "+".join(parts + [self.key])

    def __repr__(self):
        return "Accelerator(%r)" % str(self)


def _split(text):
    # "Ctrl++" means Ctrl and the plus key
    if text.endswith("++"):
        return text[:-2].split("+") + ["Plus"]
    return text.split("+")


def parse_accelerator(text):
    """Parse ``text``; returns None for an empty combination."""
    text = (text or "").strip()
    if not text:
        return None
    modifiers = set()
    key = None
    for token in _split(text):
        token = token.strip()
        if not token:
            raise HotkeyError("empty token in %r" % text)
        name = _MODIFIER_LOOKUP.get(token.lower())
        if name:
            modifiers.add(name)
            continue
        if key is not None:
            raise HotkeyError("more than one key in %r" % text)
        if len(token) == 1:
            key = token.upper()
        elif token.lower() == "plus":
            key = "Plus"
        elif token.lower() in NAMED_KEYS:
            key = token[0].upper() + token[1:]
        else:
            raise HotkeyError("unknown key %r in %r" % (token, text))
    if key is None:
        raise HotkeyError("no key in %r" % text)
    return Accelerator(modifiers, key)


def to_pynput(accelerator):
    """Render an Accelerator in pynput's HotKey.parse syntax."""
    parts = []
    for name in MODIFIER_ORDER:
        if name not in accelerator.modifiers:
            continue
        if name == "CommandOrControl":
            parts.append("<cmd>" if IS_MAC else "<ctrl>")
        elif name == "Control":
            parts.append("<ctrl>")
        elif name in ("Command", "Super"):
            parts.append("<cmd>")
        elif name == "Alt":
            parts.append("<alt>")
        elif name == "Shift":
            parts.append("<shift>")
    key = accelerator.key
    if key == "Plus":
        parts.append("+")
    elif len(key) == 1:
        parts.append(key.lower())
    else:
        parts.append("<%s>" % NAMED_KEYS[key.lower()])
    return "+".join(dict.fromkeys(parts))


def format_hotkey(hotkey):
    """Human readable form of a stored combination."""
    if not hotkey:
        return ""
    return "+".join(DISPLAY_NAMES.get(part, part) for part in hotkey.split("+"))


def _pynput_listener(mapping):
    # pynput needs a display connection at import time
    from pynput import keyboard
    return keyboard.GlobalHotKeys(mapping)


class HotkeyRegistrar:
    """Keeps at most one global binding set alive.

    ``on_trigger`` is called from the listener thread; wire it to a
    HotkeySignaler so the action runs on the Qt thread.
    """

    def __init__(self, on_trigger, listener_factory=None):
        self.on_trigger = on_trigger
        self.listener_factory = listener_factory or _pynput_listener
        self._listener = None
        self.active = None

    def unregister_all(self):
        if self._listener is not None:
            try:
                self._listener.stop()
            except Exception as e:
                log.warning("[HOTKEY] Failed to stop listener: %s", e)
        self._listener = None
        self.active = None

    def register(self, combo):
        """Replace every binding with ``combo``. Returns True when bound."""
        self.unregister_all()
        if not combo:
            log.info("[HOTKEY] Global hotkey cleared")
            return False
        try:
            accelerator = parse_accelerator(combo)
            listener = self.listener_factory({to_pynput(accelerator): self._fire})
            listener.start()
        except Exception as e:
            log.error("[HOTKEY] Failed to register %s: %s", combo, e)
            return False
        self._listener = listener
        self.active = combo
        log.info("[HOTKEY] Registered %s", combo)
        return True

    def _fire(self):
        self.on_trigger()


class HotkeyRecorder:
    """Turns the next key press into a combination string.

    ``key_down`` receives the held modifiers (a set drawn from ``ctrl``,
    ``meta``, ``shift``, ``alt``) and the key name; single characters are
    upper-cased, named keys kept as given, modifier keys ignored.
    """

    MODIFIER_KEYS = {"Control", "Shift", "Alt", "Meta", "Super"}

    def __init__(self):
        self.recording = False
        self.keys = []

    def start(self):
        self.recording = True
        self.keys = []

    def cancel(self):
        self.recording = False
        self.keys = []

    def key_down(self, modifiers, key):
        if not self.recording:
            return None
        if any(k not in MODIFIER_ORDER for k in self.keys[-1:]):
            # first non-modifier key already captured
            return "+".join(self.keys)
        keys = []
        if "ctrl" in modifiers or "meta" in modifiers:
            keys.append("CommandOrControl")
        if "shift" in modifiers:
            keys.append("Shift")
        if "alt" in modifiers:
            keys.append("Alt")
        if key and len(key) == 1:
            keys.append(key.upper())
        elif key and key not in self.MODIFIER_KEYS:
            keys.append(key)
        if keys:
            self.keys = keys
        return "+".join(self.keys)

    def key_up(self):
        """Leave recording mode; the captured combination or None."""
        if not self.recording:
            return None
        self.recording = False
        if not self.keys or self.keys[-1] in MODIFIER_ORDER:
            return None
        return "+".join(self.keys)
