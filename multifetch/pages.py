import urllib.parse
import trafilatura
from .results import FetchResult


def to_page(result: FetchResult) -> dict:
    """Readable page from a fetched HTML payload; failures keep the url as title and no text."""
    url = result.url
    if not result.ok or not result.content:
        return {"url": url, "title": url, "text": "", "domain": ""}
    html = result.text
    title = ""
    meta = trafilatura.extract_metadata(html)
    if meta and getattr(meta, "title", None): title = meta.title
    text = trafilatura.extract(html, include_comments=False, include_tables=False) or ""
    domain = urllib.parse.urlparse(url).netloc
    return {"url": url, "title": title or url, "text": text, "domain": domain}
