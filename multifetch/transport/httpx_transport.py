import asyncio
import time
from collections import deque
from typing import Dict, Optional
import httpx
from loguru import logger
from ..config import Settings
from ..constants import IDLE_INDEX
from ..results import FetchResult
from .base import CompletionRecord, Multiplexer, MultiStatus, Transport


class HttpxHandle:
    """One reusable slot channel: an AsyncClient kept open across targets."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        self.index = IDLE_INDEX
        self.url: Optional[str] = None
        self.include_headers = False
        self.capture = True
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.result: Optional[FetchResult] = None
        self.closed = False

    def __repr__(self):
        return f"<HttpxHandle index={self.index} url={self.url!r}>"

    def reset(self, index: int, url: str):
        self.index, self.url, self.result = index, url, None

    async def run(self) -> FetchResult:
        started = time.perf_counter()
        try:
            r = await self.client.get(self.url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug("Request failed for {}: {}", self.url, e)
            self.result = FetchResult.failure(
                self.index, str(self.url), f"{type(e).__name__}: {e}", time.perf_counter() - started
            )
            return self.result
        ok = r.status_code < 400
        self.result = FetchResult(
            index=self.index, url=str(self.url), ok=ok, status_code=r.status_code,
            content=r.content if self.capture else b"",
            encoding=r.encoding,
            error=None if ok else f"HTTP {r.status_code}",
            elapsed=time.perf_counter() - started,
            headers=dict(r.headers) if self.include_headers else {},
        )
        return self.result

    def close(self):
        if self.closed:
            return
        self.closed = True
        # connections belong to the loop that opened them
        if self.loop is not None and not self.loop.is_closed():
            self.loop.run_until_complete(self.client.aclose())


class HttpxMultiplexer(Multiplexer):
    """Runs handles as tasks on a private event loop that only advances when stepped."""

    def __init__(self):
        self._loop = asyncio.new_event_loop()
        self._tasks: Dict[HttpxHandle, asyncio.Task] = {}
        self._reported = set()
        self._messages = deque()

    def add_handle(self, handle: HttpxHandle) -> None:
        if handle in self._tasks:
            raise ValueError(f"{handle!r} is already registered")
        handle.loop = self._loop
        self._tasks[handle] = self._loop.create_task(handle.run())

    def remove_handle(self, handle: HttpxHandle) -> None:
        task = self._tasks.pop(handle, None)
        self._reported.discard(handle)
        if task is not None and not task.done():
            task.cancel()
            self._loop.run_until_complete(asyncio.wait([task]))

    def perform(self) -> MultiStatus:
        if self._loop.is_closed():
            return MultiStatus.FATAL
        try:
            self._loop.run_until_complete(asyncio.sleep(0))
        except RuntimeError as e:
            logger.error("Multiplexer step failed: {}", e)
            return MultiStatus.FATAL
        self._collect()
        return MultiStatus.OK

    def select(self, timeout: float) -> int:
        pending = [t for h, t in self._tasks.items() if h not in self._reported]
        if not pending or self._loop.is_closed():
            return -1
        done, _ = self._loop.run_until_complete(
            asyncio.wait(pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        )
        return len(done)

    def _collect(self):
        for handle, task in self._tasks.items():
            if not task.done() or handle in self._reported:
                continue
            self._reported.add(handle)
            error = None
            if task.cancelled():
                error = "cancelled"
            elif task.exception() is not None:
                exc = task.exception()
                error = f"{type(exc).__name__}: {exc}"
                logger.warning("Unexpected error fetching {}: {}", handle.url, error)
            if error is not None:
                handle.result = FetchResult.failure(handle.index, str(handle.url), error)
            self._messages.append(CompletionRecord(handle, error))

    def info_read(self) -> Optional[CompletionRecord]:
        return self._messages.popleft() if self._messages else None

    def get_content(self, handle: HttpxHandle) -> FetchResult:
        if handle.result is None:
            return FetchResult.failure(handle.index, str(handle.url), "no result captured")
        return handle.result

    def close(self) -> None:
        if self._loop.is_closed():
            return
        for handle in list(self._tasks):
            self.remove_handle(handle)
        self._loop.run_until_complete(self._loop.shutdown_asyncgens())
        self._loop.close()


class HttpxTransport(Transport):
    name = "httpx"

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings or Settings()
        # injectable for httpx.MockTransport
        self._transport = transport

    def open_handle(self) -> HttpxHandle:
        s = self.settings
        client = httpx.AsyncClient(
            follow_redirects=s.follow_redirects,
            headers={"User-Agent": s.user_agent},
            timeout=s.timeout,
            limits=httpx.Limits(max_connections=1, max_keepalive_connections=1),
            transport=self._transport,
        )
        return HttpxHandle(client)

    def prepare(self, handle: HttpxHandle) -> None:
        handle.include_headers = self.settings.include_headers
        handle.capture = self.settings.capture_body

    def configure(self, handle: HttpxHandle, index: int, target) -> None:
        handle.reset(index, str(target))

    def close_handle(self, handle: HttpxHandle) -> None:
        handle.close()

    def multiplexer(self) -> HttpxMultiplexer:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return HttpxMultiplexer()
        raise RuntimeError(
            "HttpxTransport drives its own event loop and cannot be used from inside a running one; "
            "call fetch from a worker thread (e.g. asyncio.to_thread)"
        )
