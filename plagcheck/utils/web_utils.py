import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import List, NamedTuple
from urllib.parse import unquote

import requests
from requests.adapters import HTTPAdapter

from plagcheck.config import (
    ACADEMIC_QUERY_MAX_CHARS,
    ACADEMIC_ROWS,
    CROSSREF_ENDPOINT,
    DUCKDUCKGO_ENDPOINT,
    FETCH_POOL_SIZE,
    MAX_CANDIDATE_URLS,
    MAX_DOCUMENT_CHARS,
    REQUEST_TIMEOUT,
    SEARCH_TIMEOUT,
    WEB_QUERY_MAX_CHARS,
    WEB_RESULTS_LIMIT,
)
from ..logger import logger

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DUCKDUCKGO_DOMAIN = "duckduckgo.com"

# DuckDuckGo's HTML results wrap every outbound link in /l/?uddg=<target>
_REDIRECT_TARGET_RE = re.compile(r"uddg=([^\"&]+)")

_BLOCK_TAGS = ("script", "style", "nav", "header", "footer", "aside")
_BLOCK_RES = [
    re.compile(rf"<{tag}[^>]*>.*?</{tag}>", re.IGNORECASE | re.DOTALL)
    for tag in _BLOCK_TAGS
]
_TAG_RE = re.compile(r"<[^>]+>")
_ENTITY_RE = re.compile(r"&[a-z]+;", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")


class FetchedDocument(NamedTuple):
    url: str
    cleaned_text: str
    length: int


# ---- Session ----
def _make_session() -> requests.Session:
    s = requests.Session()
    # a failed search or fetch is never reattempted
    adapter = HTTPAdapter(max_retries=0, pool_connections=20, pool_maxsize=20)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers.update({
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    })
    return s

_SESSION = _make_session()

# downloads abandoned at their deadline finish here without holding a caller
_FETCH_POOL = ThreadPoolExecutor(max_workers=FETCH_POOL_SIZE, thread_name_prefix="page-fetch")


# ---- Search providers ----
def extract_redirect_urls(html: str, limit: int = WEB_RESULTS_LIMIT) -> List[str]:
    """Pull outbound result URLs out of a DuckDuckGo HTML results page."""
    urls = []
    for encoded in _REDIRECT_TARGET_RE.findall(html or ""):
        try:
            url = unquote(encoded, errors="strict")
        except UnicodeDecodeError:
            continue
        if url.startswith("http") and DUCKDUCKGO_DOMAIN not in url:
            urls.append(url)
        if len(urls) >= limit:
            break
    return urls


def search_duckduckgo(query: str) -> List[str]:
    try:
        r = _SESSION.get(
            DUCKDUCKGO_ENDPOINT,
            params={"q": query[:WEB_QUERY_MAX_CHARS]},
            timeout=SEARCH_TIMEOUT,
        )
        urls = extract_redirect_urls(r.text)
        logger.info(f"duckduckgo: got {len(urls)} urls for '{query[:60]}'")
        return urls
    except Exception as e:
        logger.warning(f"duckduckgo search failed: {e}")
        return []


def search_crossref(query: str) -> List[str]:
    try:
        r = _SESSION.get(
            CROSSREF_ENDPOINT,
            params={"query": query[:ACADEMIC_QUERY_MAX_CHARS], "rows": ACADEMIC_ROWS},
            timeout=SEARCH_TIMEOUT,
        )
        r.raise_for_status()
        items = (r.json().get("message") or {}).get("items") or []
        urls = [item["URL"] for item in items if item.get("URL")]
        logger.info(f"crossref: got {len(urls)} urls for '{query[:60]}'")
        return urls
    except Exception as e:
        logger.warning(f"crossref search failed: {e}")
        return []


def search_web(query: str, max_urls: int = MAX_CANDIDATE_URLS) -> List[str]:
    """
    Collect candidate source URLs for a sentence.

    Web results come first, then academic ones. Duplicates are dropped
    keeping the first occurrence. A failing provider only empties its own
    share of the list.
    """
    urls = search_duckduckgo(query) + search_crossref(query)
    return list(dict.fromkeys(urls))[:max_urls]


# ---- Page content ----
def clean_html(html: str, max_chars: int = MAX_DOCUMENT_CHARS) -> str:
    text = html or ""
    for block_re in _BLOCK_RES:
        text = block_re.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _ENTITY_RE.sub(" ", text)
    text = _WS_RE.sub(" ", text).strip()
    return text[:max_chars]


def _response_encoding(r: requests.Response) -> str:
    # requests assumes ISO-8859-1 for text/* without a charset; pages are mostly UTF-8
    if "charset" in r.headers.get("Content-Type", "").lower() and r.encoding:
        return r.encoding
    return "utf-8"


def _download(url: str, deadline: float, cancelled: threading.Event) -> str:
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        return ""
    with _SESSION.get(url, timeout=remaining, stream=True, allow_redirects=True) as r:
        if not 200 <= r.status_code < 300:
            logger.debug(f"HTTP {r.status_code} for {url}")
            return ""
        chunks = []
        for chunk in r.iter_content(chunk_size=1024):
            if cancelled.is_set() or time.monotonic() > deadline:
                return ""
            chunks.append(chunk)
        return b"".join(chunks).decode(_response_encoding(r), errors="replace")


def fetch_page_content(url: str, timeout: float = REQUEST_TIMEOUT) -> str:
    """
    GET a page and return its visible text, or "" on any failure.

    `timeout` bounds the whole request: connect, headers, redirects and
    body. A download still running at the deadline is abandoned and told
    to stop at its next chunk.
    """
    deadline = time.monotonic() + timeout
    cancelled = threading.Event()
    future = _FETCH_POOL.submit(_download, url, deadline, cancelled)
    try:
        html = future.result(timeout=timeout)
    except FuturesTimeoutError:
        cancelled.set()
        future.cancel()
        logger.debug(f"Timeout fetching {url}")
        return ""
    except Exception as e:
        logger.debug(f"fetch failed for {url}: {e}")
        return ""

    text = clean_html(html)
    logger.info(f"   Scraped {len(text)} chars for {url}")
    return text


def fetch_document(url: str, timeout: float = REQUEST_TIMEOUT) -> FetchedDocument:
    text = fetch_page_content(url, timeout=timeout)
    return FetchedDocument(url=url, cleaned_text=text, length=len(text))
