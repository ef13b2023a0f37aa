from typing import List, Sequence
from .config import Settings, load_settings
from .dispatcher import Dispatcher
from .pages import to_page
from .results import FetchResult
from .transport.base import Transport


def fetch_many(urls: Sequence[str], max_concurrent: int | None = None, debug: bool | None = None,
               settings: Settings | None = None, transport: Transport | None = None) -> List[FetchResult]:
    settings = settings or load_settings()
    d = Dispatcher(transport=transport, settings=settings)
    d.configure(max_concurrent, debug)
    return d.fetch(urls)


def fetch_pages(urls: Sequence[str], **kw) -> List[dict]:
    return [to_page(r) for r in fetch_many(urls, **kw)]
