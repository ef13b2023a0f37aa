from typing import Dict, Optional
from pydantic import BaseModel


class FetchResult(BaseModel):
    """Payload placed in the result table for one target."""
    index: int
    url: str
    ok: bool = False
    status_code: Optional[int] = None
    # raw body bytes, as received
    content: bytes = b""
    encoding: Optional[str] = None
    error: Optional[str] = None
    elapsed: float = 0.0
    headers: Dict[str, str] = {}

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding or "utf-8", errors="replace")

    @classmethod
    def failure(cls, index: int, url: str, error: str, elapsed: float = 0.0) -> "FetchResult":
        return cls(index=index, url=url, ok=False, error=error, elapsed=elapsed)
