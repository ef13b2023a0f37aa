from multifetch.pages import to_page
from multifetch.results import FetchResult

HTML = """<html><head><title>Example Page</title>
<meta property="og:title" content="Example Page"></head>
<body><article><h1>Example Page</h1>
<p>This page exists so the extractor has a real paragraph to work with. It talks about
bounded concurrency, slot pools and result tables, and keeps going for a while so that the
main content is long enough to be recognised as the body of the document.</p>
<p>A second paragraph adds more words about scheduling, draining completions and refilling
free slots as soon as they are released by the multiplexer.</p>
</article></body></html>"""


def test_page_from_html():
    r = FetchResult(index=0, url="https://example.com/post", ok=True, status_code=200, content=HTML.encode())
    page = to_page(r)

    assert page["url"] == "https://example.com/post"
    assert page["title"] == "Example Page"
    assert page["domain"] == "example.com"
    assert isinstance(page["text"], str)


def test_failed_result_gives_empty_page():
    r = FetchResult.failure(3, "https://down.example/", "ConnectError: refused")
    assert to_page(r) == {"url": "https://down.example/", "title": "https://down.example/", "text": "", "domain": ""}
