class DispatcherError(RuntimeError):
    """Base class for failures of a whole fetch operation."""


class SlotLookupError(DispatcherError):
    """A completion record does not match a busy slot in the pool."""

    def __init__(self, handle, reason="no slot owns it"):
        super().__init__(f"Completed handle {handle!r} rejected: {reason}")
        self.handle = handle


class MultiplexerError(DispatcherError):
    """The multiplexer reported a status that is neither OK nor CALL_AGAIN."""

    def __init__(self, status, partial_results=None):
        super().__init__(f"Multiplexer failed with status {status!r}; fetch aborted")
        self.status = status
        self.partial_results = partial_results or []
