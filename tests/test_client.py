import pytest
import requests

from nanpush.client import RemoteWriteClient
from nanpush.errors import ConfigError, StoreError
from conftest import FakeResponse, FakeSession

URL = "http://cortex:9009/api/v1/push"


@pytest.mark.parametrize("url", ["cortex:9009/api/v1/push", "ftp://cortex/push", "http://", ""])
def test_rejects_bad_urls(url):
    with pytest.raises(ConfigError):
        RemoteWriteClient(url, session=FakeSession())


def test_store_posts_remote_write_request(fake_session):
    client = RemoteWriteClient(URL, session=fake_session)
    client.store(b"payload")

    assert fake_session.calls == [{"url": URL, "data": b"payload", "timeout": 20.0}]
    assert fake_session.headers["Content-Encoding"] == "snappy"
    assert fake_session.headers["Content-Type"] == "application/x-protobuf"
    assert fake_session.headers["X-Prometheus-Remote-Write-Version"] == "0.1.0"
    assert fake_session.headers["User-Agent"].startswith("nanpush/")


def test_timeout_capped_by_client_timeout(fake_session):
    client = RemoteWriteClient(URL, timeout=5.0, session=fake_session)
    client.store(b"x")
    assert fake_session.calls[0]["timeout"] == 5.0


def test_non_2xx_raises_with_truncated_body():
    session = FakeSession([FakeResponse(400, "Bad Request", b"out of order sample " * 50)])
    client = RemoteWriteClient(URL, session=session)

    with pytest.raises(StoreError) as exc:
        client.store(b"x")

    msg = str(exc.value)
    assert msg.startswith("server returned HTTP status 400 Bad Request: out of order sample")
    assert len(msg) < 320
    assert not exc.value.recoverable


def test_5xx_is_flagged_recoverable():
    session = FakeSession([FakeResponse(503, "Service Unavailable", b"ingester down")])
    with pytest.raises(StoreError) as exc:
        RemoteWriteClient(URL, session=session).store(b"x")
    assert exc.value.recoverable


def test_connection_error_wrapped():
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    with pytest.raises(StoreError) as exc:
        RemoteWriteClient(URL, session=session).store(b"x")

    assert "connection refused" in str(exc.value)
    assert isinstance(exc.value.__cause__, requests.ConnectionError)


def test_context_manager_closes_session(fake_session):
    with RemoteWriteClient(URL, session=fake_session):
        pass
    assert fake_session.closed
