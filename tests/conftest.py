import orjson
import pytest


class FakeResponse:
    def __init__(self, status=200, payload=None, text=None):
        self.status = status
        self.payload = payload
        self._text = text

    async def read(self):
        if self._text is not None:
            return self._text.encode()
        return orjson.dumps(self.payload)

    async def text(self):
        if self._text is not None:
            return self._text
        return orjson.dumps(self.payload).decode()

    async def json(self, content_type="application/json"):
        return self.payload

    def raise_for_status(self):
        if self.status >= 400:
            raise RuntimeError(f"HTTP {self.status}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Minimal stand-in for aiohttp.ClientSession that records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def _next(self, method, url, kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse
