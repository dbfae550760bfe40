"""Scripted HTTP fakes shared by the adapter tests."""

BASE_URL = "https://directline.botframework.com/v3/directline"


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeSession:
    """Scripted stand-in for `requests.Session` keyed by (method, path suffix)."""

    def __init__(self, token=None, conversation=None, send=None, polls=None):
        self.token = token or FakeResponse(body={"token": "T"})
        self.conversation = conversation or FakeResponse(body={"conversationId": "C"})
        self.send = send or FakeResponse(status_code=201, body={"id": "C|0"})
        self.polls = list(polls or [])
        self.calls = []
        self.closed = False

    def _record(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))

    def post(self, url, **kwargs):
        self._record("POST", url, kwargs)
        if url.endswith("/tokens/generate"):
            return _resolve(self.token)
        if url.endswith("/conversations"):
            return _resolve(self.conversation)
        if url.endswith("/activities"):
            return _resolve(self.send)
        raise AssertionError(f"unexpected POST {url}")

    def get(self, url, **kwargs):
        self._record("GET", url, kwargs)
        if not self.polls:
            raise AssertionError("poll issued after script was exhausted")
        return _resolve(self.polls.pop(0))

    def close(self):
        self.closed = True

    def count(self, method, suffix):
        return sum(1 for m, url, _ in self.calls if m == method and url.endswith(suffix))


def _resolve(item):
    if isinstance(item, Exception):
        raise item
    return item


def activities(*pairs):
    return FakeResponse(body={"activities": [{"from": {"id": sender}, "text": text} for sender, text in pairs]})
