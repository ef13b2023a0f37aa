"""
Contract between the dispatcher and whatever actually performs the I/O.

A Transport creates reusable handles and configures them for a target; its
Multiplexer runs many registered handles from one thread: `perform` advances
them without blocking, `select` waits (bounded) for one to be ready and
`info_read` hands out completion records one at a time.
"""
from enum import Enum
from typing import Any, NamedTuple, Optional


class MultiStatus(Enum):
    OK = "ok"
    CALL_AGAIN = "call_again"
    FATAL = "fatal"


class CompletionRecord(NamedTuple):
    handle: Any
    error: Optional[str] = None


class Multiplexer:
    def add_handle(self, handle) -> None:
        raise NotImplementedError

    def remove_handle(self, handle) -> None:
        raise NotImplementedError

    def perform(self) -> MultiStatus:
        """Advance every registered handle once, without blocking."""
        raise NotImplementedError

    def select(self, timeout: float) -> int:
        """Wait up to `timeout` seconds; number of ready handles, -1 if there is nothing to wait on."""
        raise NotImplementedError

    def info_read(self) -> Optional[CompletionRecord]:
        raise NotImplementedError

    def get_content(self, handle) -> Any:
        raise NotImplementedError

    def close(self) -> None:
        pass


class Transport:
    name: str

    def open_handle(self):
        raise NotImplementedError

    def prepare(self, handle) -> None:
        """Apply the per-slot reuse configuration to a freshly opened handle."""
        raise NotImplementedError

    def configure(self, handle, index: int, target) -> None:
        raise NotImplementedError

    def close_handle(self, handle) -> None:
        pass

    def multiplexer(self) -> Multiplexer:
        raise NotImplementedError
