import pytest
import requests

from plagcheck.utils import web_utils


class FakeResponse:
    def __init__(self, status_code=200, text="", json_data=None, chunks=None,
                 encoding="utf-8", headers=None):
        self.status_code = status_code
        self.text = text
        self.encoding = encoding
        self.headers = headers or {}
        self._json = json_data
        self._chunks = chunks

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def iter_content(self, chunk_size=1):
        if self._chunks is not None:
            yield from self._chunks
        else:
            yield self.text.encode(self.encoding)

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Routes GETs by URL prefix to a FakeResponse or an exception."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        for prefix, result in self.routes.items():
            if url.startswith(prefix):
                if isinstance(result, Exception):
                    raise result
                return result
        raise requests.ConnectionError(f"no route for {url}")


@pytest.fixture
def fake_session(monkeypatch):
    def _install(routes):
        session = FakeSession(routes)
        monkeypatch.setattr(web_utils, "_SESSION", session)
        return session
    return _install
