"""
Message channel between the note editor and the window/storage side.

Three kinds of traffic:

* ``invoke(channel, *args)``: request/response, handled synchronously.
* ``send(channel, *args)``: fire-and-forget, delivered later through ``post``.
* ``emit(channel, *args)``: notification from the control side to every
  subscriber, also delivered through ``post``.

``post`` takes a zero-argument callable. The application passes one that
queues onto the Qt event loop, which keeps delivery FIFO; the default runs
the callable immediately.
"""
import logging
from collections import defaultdict

log = logging.getLogger(__name__)


class BridgeError(LookupError):
    pass


def _call_now(fn):
    fn()


class Bridge:
    def __init__(self, post=None):
        self.post = post or _call_now
        self._handlers = {}
        self._receivers = {}
        self._subscribers = defaultdict(list)

    # --- control side ---

    def handle(self, channel, handler):
        """Answer ``invoke(channel, ...)`` with ``handler``."""
        self._handlers[channel] = handler

    def on(self, channel, receiver):
        """Receive ``send(channel, ...)`` messages."""
        self._receivers[channel] = receiver

    def emit(self, channel, *args):
        for callback in list(self._subscribers[channel]):
            self.post(lambda cb=callback: cb(*args))

    # --- editor side ---

    def invoke(self, channel, *args):
        try:
            handler = self._handlers[channel]
        except KeyError:
            raise BridgeError("no handler for %r" % channel) from None
        return handler(*args)

    def send(self, channel, *args):
        receiver = self._receivers.get(channel)
        if receiver is None:
            log.warning("[BRIDGE] Dropped message for unknown channel %s", channel)
            return
        self.post(lambda: receiver(*args))

    def subscribe(self, channel, callback):
        self._subscribers[channel].append(callback)

    def unsubscribe(self, channel, callback):
        if callback in self._subscribers[channel]:
            self._subscribers[channel].remove(callback)
