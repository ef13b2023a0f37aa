from .base import CompletionRecord, Multiplexer, MultiStatus, Transport
from .httpx_transport import HttpxHandle, HttpxMultiplexer, HttpxTransport

__all__ = [
    "CompletionRecord", "Multiplexer", "MultiStatus", "Transport",
    "HttpxHandle", "HttpxMultiplexer", "HttpxTransport",
]
