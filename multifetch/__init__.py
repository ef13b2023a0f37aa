from .config import Settings, load_settings
from .dispatcher import Dispatcher, DispatcherState, DispatchStats
from .errors import DispatcherError, MultiplexerError, SlotLookupError
from .fetch import fetch_many, fetch_pages
from .results import FetchResult

__all__ = [
    "Dispatcher", "DispatcherState", "DispatchStats", "DispatcherError", "MultiplexerError",
    "SlotLookupError", "FetchResult", "Settings", "load_settings", "fetch_many", "fetch_pages",
]
