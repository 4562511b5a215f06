import pytest


class FakeResponse:
    def __init__(self, status_code=200, reason="OK", content=b""):
        self.status_code = status_code
        self.reason = reason
        self.content = content


class FakeSession:
    """Stands in for requests.Session, recording every POST."""

    def __init__(self, responses=None, error=None):
        self.headers = {}
        self.calls = []
        self.responses = list(responses or [])
        self.error = error
        self.closed = False

    def post(self, url, data=None, timeout=None):
        self.calls.append({"url": url, "data": data, "timeout": timeout})
        if self.error is not None:
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return FakeResponse(204, "No Content")

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession()
