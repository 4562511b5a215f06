import logging
from urllib.parse import urlparse

import requests

from . import __version__
from .config import CLIENT_TIMEOUT, STORE_TIMEOUT
from .errors import ConfigError, StoreError

logger = logging.getLogger(__name__)

MAX_ERROR_BODY = 256
REMOTE_WRITE_VERSION = "0.1.0"


class RemoteWriteClient:
    """Pushes snappy-compressed WriteRequests to a remote-write endpoint."""

    def __init__(self, url: str, timeout: float = CLIENT_TIMEOUT, name: str = "remote-write", session=None):
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"invalid remote write url {url!r}")

        self.url = url
        self.name = name
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({
            "Content-Encoding": "snappy",
            "Content-Type": "application/x-protobuf",
            "User-Agent": f"nanpush/{__version__}",
            "X-Prometheus-Remote-Write-Version": REMOTE_WRITE_VERSION,
        })

    def store(self, payload: bytes, timeout: float = STORE_TIMEOUT):
        timeout = min(timeout, self.timeout)
        try:
            resp = self.session.post(self.url, data=payload, timeout=timeout)
        except requests.RequestException as e:
            raise StoreError(f"{self.name}: {e}", recoverable=True) from e

        if resp.status_code // 100 != 2:
            body = resp.content[:MAX_ERROR_BODY].decode("utf-8", errors="replace").strip()
            raise StoreError(
                f"server returned HTTP status {resp.status_code} {resp.reason}: {body}",
                recoverable=resp.status_code >= 500,
            )
        logger.debug("%s: stored %d bytes (%d)", self.name, len(payload), resp.status_code)
        return resp

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
