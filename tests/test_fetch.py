from loguru import logger

from multifetch.config import Settings
from multifetch.fetch import fetch_many, fetch_pages
from tests.conftest import FakeTransport


def test_fetch_many_with_explicit_concurrency():
    t = FakeTransport()
    s = Settings(select_timeout=0.0, retry_sleep=0.0, idle_sleep=0.0)
    results = fetch_many(["u1", "u2", "u3", "u4"], max_concurrent=2, settings=s, transport=t)

    assert [r.url for r in results] == ["u1", "u2", "u3", "u4"]
    assert len(t.opened) == 2


def test_fetch_pages_marks_failures():
    t = FakeTransport(failures={"https://x.example/b"})
    s = Settings(select_timeout=0.0, retry_sleep=0.0, idle_sleep=0.0)
    pages = fetch_pages(["https://x.example/a", "https://x.example/b"], settings=s, transport=t)

    assert pages[1] == {"url": "https://x.example/b", "title": "https://x.example/b", "text": "", "domain": ""}
    assert pages[0]["domain"] == "x.example"


def test_explicit_debug_false_overrides_settings():
    lines = []
    sink = logger.add(lambda m: lines.append(m.record["message"]), level="DEBUG")
    try:
        s = Settings(debug=True, select_timeout=0.0, retry_sleep=0.0, idle_sleep=0.0)
        fetch_many(["u1", "u2"], debug=False, settings=s, transport=FakeTransport())
        assert not any(l.startswith("Active:") for l in lines)

        fetch_many(["u1", "u2"], settings=s, transport=FakeTransport())
        assert any(l.startswith("Active:") for l in lines)
    finally:
        logger.remove(sink)
