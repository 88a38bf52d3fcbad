import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from plagcheck.utils import web_utils
from plagcheck.utils.web_utils import (
    clean_html, extract_redirect_urls, fetch_document, fetch_page_content,
    search_crossref, search_duckduckgo, search_web,
)
from conftest import FakeResponse

DDG = web_utils.DUCKDUCKGO_ENDPOINT
CROSSREF = web_utils.CROSSREF_ENDPOINT

DDG_HTML = """
<a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fexample.com%2Fpage&amp;rut=abc">One</a>
<a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fduckduckgo.com%2Fy.js&amp;rut=def">Ad</a>
<a class="result__a" href="//duckduckgo.com/l/?uddg=ftp%3A%2F%2Ffiles.example.org&amp;rut=ghi">Ftp</a>
<a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fblog.example.net%2Fpost%3Fid%3D7&amp;rut=jkl">Two</a>
"""

def test_extract_redirect_urls_decodes_and_filters():
    assert extract_redirect_urls(DDG_HTML) == [
        "https://example.com/page",
        "https://blog.example.net/post?id=7",
    ]

def test_extract_redirect_urls_caps_and_skips_bad_encoding():
    html = 'uddg=https%3A%2F%2Fbad.example%2F%FF"\n' + "".join(
        f'uddg=https%3A%2F%2Fsite{i}.example"' for i in range(12)
    )
    urls = extract_redirect_urls(html)
    assert len(urls) == 8
    assert urls[0] == "https://site0.example"

def test_search_duckduckgo_truncates_query(fake_session):
    session = fake_session({DDG: FakeResponse(text=DDG_HTML)})
    urls = search_duckduckgo("x" * 500)
    assert urls == ["https://example.com/page", "https://blog.example.net/post?id=7"]
    _, kwargs = session.calls[0]
    assert kwargs["params"]["q"] == "x" * 200

def test_search_crossref_collects_urls(fake_session):
    data = {"message": {"items": [
        {"URL": "https://doi.org/10.1/a"},
        {"title": ["no url"]},
        {"URL": "https://doi.org/10.1/b"},
    ]}}
    session = fake_session({CROSSREF: FakeResponse(json_data=data)})
    assert search_crossref("y" * 400) == ["https://doi.org/10.1/a", "https://doi.org/10.1/b"]
    _, kwargs = session.calls[0]
    assert kwargs["params"] == {"query": "y" * 150, "rows": 5}

def test_search_crossref_malformed_response(fake_session):
    fake_session({CROSSREF: FakeResponse(text="<html>oops</html>")})
    assert search_crossref("query") == []
    fake_session({CROSSREF: FakeResponse(status_code=503, json_data={})})
    assert search_crossref("query") == []

def test_search_web_merges_dedupes_and_caps(monkeypatch):
    monkeypatch.setattr(web_utils, "search_duckduckgo", lambda q: [f"https://w{i}.example" for i in range(8)])
    monkeypatch.setattr(
        web_utils, "search_crossref",
        lambda q: ["https://w1.example", "https://doi.org/a", "https://doi.org/b", "https://doi.org/c"],
    )
    urls = search_web("some sentence")
    assert len(urls) == 10
    assert urls[:8] == [f"https://w{i}.example" for i in range(8)]
    assert urls[8:] == ["https://doi.org/a", "https://doi.org/b"]

def test_search_web_survives_one_provider_down(fake_session):
    fake_session({
        DDG: requests.ConnectionError("blocked"),
        CROSSREF: FakeResponse(json_data={"message": {"items": [{"URL": "https://doi.org/x"}]}}),
    })
    assert search_web("sentence") == ["https://doi.org/x"]

def test_search_web_all_providers_down(fake_session):
    fake_session({})
    assert search_web("sentence") == []

def test_clean_html_removes_blocks_tags_and_entities():
    html = """<html><HEAD><Style>body {color: red}</Style></HEAD>
    <body><nav class="top">Home | About</nav><header>Site header</header>
    <script type="text/javascript">
      var x = "<p>not text</p>";
    </script>
    <article><h1>Title</h1><p>First&nbsp;paragraph &amp; more.</p></article>
    <aside>Related links</aside><footer>Copyright</footer></body></html>"""
    assert clean_html(html) == "Title First paragraph more."

def test_clean_html_truncates():
    assert len(clean_html("<p>" + "word " * 3000 + "</p>")) == 5000

def test_fetch_page_content_success(fake_session):
    fake_session({"https://example.com": FakeResponse(text="<p>Hello   <b>world</b></p>")})
    assert fetch_page_content("https://example.com/a") == "Hello world"

def test_fetch_page_content_non_success_status(fake_session):
    fake_session({"https://example.com": FakeResponse(status_code=404, text="<p>Not found</p>")})
    assert fetch_page_content("https://example.com/missing") == ""

def test_fetch_page_content_timeout_is_empty(fake_session):
    fake_session({"https://slow.example": requests.Timeout("read timed out")})
    assert fetch_page_content("https://slow.example/page") == ""

def test_fetch_page_content_defaults_to_utf8_without_charset(fake_session):
    # requests reports ISO-8859-1 for text/html without a charset
    fake_session({"https://accents.example": FakeResponse(
        chunks=["<p>café naïve résumé</p>".encode("utf-8")],
        encoding="ISO-8859-1",
        headers={"Content-Type": "text/html"},
    )})
    assert fetch_page_content("https://accents.example/") == "café naïve résumé"

def test_fetch_page_content_honours_declared_charset(fake_session):
    fake_session({"https://latin.example": FakeResponse(
        chunks=["<p>café crème</p>".encode("latin-1")],
        encoding="ISO-8859-1",
        headers={"Content-Type": "text/html; charset=ISO-8859-1"},
    )})
    assert fetch_page_content("https://latin.example/") == "café crème"

class _SlowHandler(BaseHTTPRequestHandler):
    """Stalls before the headers on /stall, trickles the body on /trickle."""

    def do_GET(self):
        try:
            if self.path == "/stall":
                time.sleep(2)
            self.send_response(200)
            self.send_header("Content-Type", "text/html")
            self.end_headers()
            if self.path == "/trickle":
                for _ in range(6):
                    self.wfile.write(b"x")
                    self.wfile.flush()
                    time.sleep(0.4)
            self.wfile.write(b"<p>done</p>")
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, *args):
        pass

@pytest.fixture
def slow_server(monkeypatch):
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    server = ThreadingHTTPServer(("127.0.0.1", 0), _SlowHandler)
    server.daemon_threads = True
    threading.Thread(target=server.serve_forever, daemon=True).start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()

@pytest.mark.parametrize("path", ["/trickle", "/stall"])
def test_fetch_page_content_deadline_is_hard(slow_server, path):
    start = time.monotonic()
    assert fetch_page_content(slow_server + path, timeout=1) == ""
    assert time.monotonic() - start < 1.5

def test_fetch_page_content_real_server_success(slow_server):
    assert fetch_page_content(slow_server + "/fast", timeout=5) == "done"

def test_fetch_document_wraps_text(fake_session):
    fake_session({"https://example.com": FakeResponse(text="<p>Some body text</p>")})
    doc = fetch_document("https://example.com/doc")
    assert doc.url == "https://example.com/doc"
    assert doc.cleaned_text == "Some body text"
    assert doc.length == len("Some body text")
