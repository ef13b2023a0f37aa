"""
Scripted in-memory transport for driving the dispatcher deterministically.

Each target finishes after `latency[target]` multiplexer steps (default 1).
Targets in `failures` complete with a failure FetchResult. `script` feeds
the statuses returned by successive perform() calls; OK once exhausted.
"""
from collections import deque

import pytest

from multifetch.config import Settings
from multifetch.results import FetchResult
from multifetch.transport.base import CompletionRecord, Multiplexer, MultiStatus, Transport


class FakeHandle:
    def __init__(self, n):
        self.n = n
        self.prepared = False
        self.closed = False
        self.index = -1
        self.target = None
        self.remaining = 0
        self.served = 0

    def __repr__(self):
        return f"<FakeHandle {self.n}>"


class FakeMultiplexer(Multiplexer):
    def __init__(self, transport, script=()):
        self.transport = transport
        self.script = deque(script)
        self.registered = []
        self.finished = set()
        self.messages = deque()
        self.closed = False
        self.steps = 0

    def add_handle(self, handle):
        assert handle not in self.registered
        self.registered.append(handle)
        self.transport.busy_samples.append(len(self.registered))

    def remove_handle(self, handle):
        self.registered.remove(handle)
        self.finished.discard(handle)

    def perform(self):
        if self.transport.on_perform is not None:
            self.transport.on_perform()
        status = self.script.popleft() if self.script else MultiStatus.OK
        if status is MultiStatus.FATAL:
            return status
        self.steps += 1
        self.transport.busy_samples.append(len(self.registered))
        for h in self.registered:
            if h in self.finished:
                continue
            h.remaining -= 1
            if h.remaining <= 0:
                self.finished.add(h)
                error = "simulated failure" if h.target in self.transport.failures else None
                self.messages.append(CompletionRecord(h, error))
        return status

    def select(self, timeout):
        if not self.registered:
            return -1
        return len(self.finished)

    def info_read(self):
        return self.messages.popleft() if self.messages else None

    def get_content(self, handle):
        if handle.target in self.transport.failures:
            return FetchResult.failure(handle.index, handle.target, "simulated failure")
        return FetchResult(index=handle.index, url=handle.target, ok=True, status_code=200,
                           content=f"body of {handle.target}".encode())

    def close(self):
        self.closed = True


class FakeTransport(Transport):
    name = "fake"

    def __init__(self, latency=None, failures=(), script=(), default_latency=1):
        self.latency = latency or {}
        self.failures = set(failures)
        self.script = script
        self.default_latency = default_latency
        self.opened = []
        self.started = []
        self.busy_samples = []
        self.multis = []
        self.on_perform = None

    def open_handle(self):
        h = FakeHandle(len(self.opened))
        self.opened.append(h)
        return h

    def prepare(self, handle):
        handle.prepared = True

    def configure(self, handle, index, target):
        handle.index = index
        handle.target = target
        handle.remaining = self.latency.get(target, self.default_latency)
        handle.served += 1
        self.started.append(target)

    def close_handle(self, handle):
        handle.closed = True

    def multiplexer(self):
        m = FakeMultiplexer(self, self.script)
        self.multis.append(m)
        return m


@pytest.fixture
def fast_settings():
    return Settings(select_timeout=0.0, retry_sleep=0.0, idle_sleep=0.0)


@pytest.fixture
def make_transport():
    return FakeTransport
