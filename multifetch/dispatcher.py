"""
Bounded-concurrency dispatcher.

Targets wait on a pending stack and are started on a fixed pool of reusable
transport slots, at most `max_concurrent` at a time. A single-threaded loop
steps the transport's multiplexer, drains every completion it reports, frees
the slot, refills it straight away and stores the payload at the target's
original position. Scheduling is last-in first-out; the returned list is
always in input order.
"""
import time
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple
from loguru import logger
from pydantic import BaseModel
from .config import Settings, coerce_concurrency
from .constants import IDLE_INDEX
from .errors import MultiplexerError, SlotLookupError
from .slots import SlotPool
from .transport.base import CompletionRecord, Multiplexer, MultiStatus, Transport


class DispatcherState(Enum):
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


class DispatchStats(BaseModel):
    slots_created: int = 0
    peak_active: int = 0
    started: int = 0
    completed: int = 0
    failed: int = 0


class Dispatcher:
    def __init__(self, transport: Transport | None = None, settings: Settings | None = None):
        self.settings = settings or Settings()
        if transport is None:
            from .transport.httpx_transport import HttpxTransport
            transport = HttpxTransport(self.settings)
        self.transport = transport
        self.max_concurrent = self.settings.max_concurrent
        self.debug = self.settings.debug
        self.state = DispatcherState.DONE
        self.stats = DispatchStats()
        self._pool: Optional[SlotPool] = None
        self._multi: Optional[Multiplexer] = None
        self._pending: List[Tuple[int, Any]] = []
        self._results: List[Any] = []
        self._completed = set()

    def configure(self, max_concurrent: int | None = None, debug: bool | None = None) -> "Dispatcher":
        """Set pool size (non-positive means the default) and debug logging; call before fetch."""
        if max_concurrent is not None:
            self.max_concurrent = coerce_concurrency(max_concurrent)
        if debug is not None:
            self.debug = bool(debug)
        return self

    # --- public entry point ---
    def fetch(self, targets: Sequence[Any]) -> List[Any]:
        """Fetch every target; result i belongs to targets[i] whatever the completion order."""
        self._init(targets)
        if not self._pending:
            self.state = DispatcherState.DONE
            return []
        self._multi = self.transport.multiplexer()
        try:
            self._fill()
            self._update_state()
            self._print_info()
            self._run()
        except MultiplexerError as e:
            e.partial_results = list(self._results)
            raise
        finally:
            self._teardown()
        return self._results

    # --- setup / teardown ---
    def _init(self, targets: Sequence[Any]):
        self.stats = DispatchStats()
        self._results = [None] * len(targets)
        self._completed = set()
        # a stack of (original index, target); popping from the end is LIFO
        self._pending = list(enumerate(targets))
        self._pool = SlotPool(self.max_concurrent, self.transport)

    def _teardown(self):
        self.stats.slots_created = self._pool.created
        for slot in self._pool:
            if slot.busy:
                self._multi.remove_handle(slot.handle)
                slot.release()
        self._pool.close()
        self._multi.close()
        self._multi = None

    # --- scheduling ---
    def _fill(self) -> bool:
        """Start as many pending targets as there are free slots; False if nothing is pending."""
        started = False
        while self._pending:
            i = self._pool.find_free()
            if i is None:
                break
            slot = self._pool[i]
            index, target = self._pending.pop()
            self.transport.configure(slot.handle, index, target)
            slot.assign(index)
            self._multi.add_handle(slot.handle)
            started = True
            self.stats.started += 1
            self.stats.peak_active = max(self.stats.peak_active, self._pool.active)
            self._print_info()
        return started

    def _complete(self, record: CompletionRecord):
        i = self._pool.find_by_handle(record.handle)
        if i is None:
            raise SlotLookupError(record.handle)
        slot = self._pool[i]
        if not slot.busy or slot.target_index == IDLE_INDEX:
            raise SlotLookupError(record.handle, "its slot is idle")
        if slot.target_index in self._completed:
            raise SlotLookupError(record.handle, f"result {slot.target_index} already stored")
        payload = self._multi.get_content(record.handle)
        self._results[slot.target_index] = payload
        self._completed.add(slot.target_index)
        self._multi.remove_handle(record.handle)
        slot.release()
        self.stats.completed += 1
        if record.error is not None or getattr(payload, "ok", True) is False:
            self.stats.failed += 1

    # --- event loop ---
    def _run(self):
        s = self.settings
        status = self._perform()
        while status is MultiStatus.CALL_AGAIN:
            time.sleep(s.retry_sleep)
            status = self._perform()

        while self.state is not DispatcherState.DONE:
            self._check(status)
            if self._multi.select(s.select_timeout) == -1:
                time.sleep(s.idle_sleep)
            while True:
                status = self._perform()
                if status is not MultiStatus.CALL_AGAIN:
                    break
                time.sleep(s.retry_sleep)
        self._check(status)

    def _perform(self) -> MultiStatus:
        status = self._multi.perform()
        self._drain()
        return status

    def _drain(self):
        while (record := self._multi.info_read()) is not None:
            self._complete(record)
            self._fill()
            self._update_state()
            self._print_info()

    def _check(self, status: MultiStatus):
        if status in (MultiStatus.OK, MultiStatus.CALL_AGAIN):
            return
        logger.error("Multiplexer returned {}; {} targets pending, {} active",
                     status, len(self._pending), self._pool.active)
        raise MultiplexerError(status)

    def _update_state(self):
        if self._pool.active == 0 and not self._pending:
            self.state = DispatcherState.DONE
        elif self._pending:
            self.state = DispatcherState.RUNNING
        else:
            self.state = DispatcherState.DRAINING

    def _print_info(self):
        if not self.debug:
            return
        logger.debug("Active: {} / Left: {}", self._pool.active, len(self._pending))
