import asyncio

import pytest

from custom_components.novy_hood.const import DEF_OPTIONS, DEF_STATE


# ---- helpers ----
class FakeHandle:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    def cancelled(self):
        return self._cancelled


class FakeLoop:
    """Virtual clock: ``call_later`` only fires when the test advances time."""
    def __init__(self):
        self.now = 0.0
        self.handles = []
        self.tasks = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    def create_task(self, coro):
        task = asyncio.get_running_loop().create_task(coro)
        self.tasks.append(task)
        return task

    def pending(self):
        return [h for h in self.handles if not h.cancelled()]

    async def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = sorted((h for h in self.pending() if h.when <= target + 1e-9),
                         key=lambda h: h.when)
            if not due:
                break
            handle = due[0]
            self.handles.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
            while self.tasks:
                await self.tasks.pop(0)
        self.now = target


class FakeTransport:
    def __init__(self, settings=None, address=None):
        self.settings = {**DEF_STATE, **DEF_OPTIONS, **(settings or {})}
        self.address = address
        self.sent = []
        self.updates = []
        self.fail_save = False
        self.fail_send = False

    def get_settings(self):
        return dict(self.settings)

    def set_settings(self, settings):
        if self.fail_save:
            raise OSError("disk full")
        self.settings.update(settings)

    async def async_send(self, payload):
        if self.fail_send:
            raise ConnectionError("remote unavailable")
        self.sent.append(payload.unit)

    def matches(self, data):
        if not data.get("unit"):
            return False
        return self.address is None or data.get("address") == self.address

    def update(self, payload):
        self.updates.append(payload)


@pytest.fixture
def loop():
    return FakeLoop()


@pytest.fixture
def transport():
    return FakeTransport()
