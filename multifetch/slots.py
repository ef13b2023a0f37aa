from typing import Any, Iterator, List, Optional
from .constants import IDLE_INDEX
from .transport.base import Transport


class Slot:
    __slots__ = ("handle", "busy", "target_index", "served")

    def __init__(self, handle: Any):
        self.handle = handle
        self.busy = False
        self.target_index = IDLE_INDEX
        self.served = 0

    def assign(self, index: int):
        self.target_index = index
        self.busy = True
        self.served += 1

    def release(self):
        self.busy = False
        self.target_index = IDLE_INDEX

    def __repr__(self):
        return f"<Slot busy={self.busy} target_index={self.target_index} served={self.served}>"


class SlotPool:
    """Fixed number of positions; a Slot (and its transport handle) is created on first use."""

    def __init__(self, size: int, transport: Transport):
        self.size = size
        self.transport = transport
        self._slots: List[Optional[Slot]] = [None] * size

    def __len__(self):
        return self.size

    def __getitem__(self, i: int) -> Optional[Slot]:
        return self._slots[i]

    def __iter__(self) -> Iterator[Slot]:
        return (s for s in self._slots if s is not None)

    def _create(self, i: int) -> Slot:
        handle = self.transport.open_handle()
        self.transport.prepare(handle)
        self._slots[i] = Slot(handle)
        return self._slots[i]

    def find_free(self) -> Optional[int]:
        for i, slot in enumerate(self._slots):
            if slot is None:
                self._create(i)
                return i
            if not slot.busy:
                return i
        return None

    def find_by_handle(self, handle) -> Optional[int]:
        for i, slot in enumerate(self._slots):
            if slot is not None and slot.handle is handle:
                return i
        return None

    @property
    def created(self) -> int:
        return sum(1 for _ in self)

    @property
    def active(self) -> int:
        return sum(1 for s in self if s.busy)

    def close(self):
        for slot in self:
            self.transport.close_handle(slot.handle)
        self._slots = [None] * self.size
