import os
import re
import json
from pydantic import ValidationError

from .errors import ConfigError
from .models import NodeTable, DEFAULT_NODES

# ================= CONFIG =================
REMOTE_WRITE_URL = os.getenv("REMOTE_WRITE_URL", "http://cortex:9009/api/v1/push")
SEND_INTERVAL = os.getenv("SEND_INTERVAL", "10s")
NODES_FILE = os.getenv("NODES_FILE", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORE_TIMEOUT = 20.0
CLIENT_TIMEOUT = 30.0


_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(text):
    """Parse a duration such as "10s", "1m30s" or "250ms" into seconds."""
    s = text.strip()
    if not s:
        raise ConfigError("invalid duration: empty string")
    # leading "+" allowed, "-" rejected
    if s.startswith("+"):
        s = s[1:]
    if s == "0":
        raise ConfigError("send interval must be positive, got 0")

    pos = 0
    seconds = 0.0
    while pos < len(s):
        m = _DURATION_PART.match(s, pos)
        if m is None:
            raise ConfigError(f"invalid duration {text!r}")
        seconds += float(m.group(1)) * _UNITS[m.group(2)]
        pos = m.end()

    if seconds <= 0:
        raise ConfigError(f"send interval must be positive, got {text!r}")
    return seconds


def load_nodes(path=None):
    """Return the node table, read from a JSON file when a path is given.

    The file holds either a list of nodes or {"nodes": [...]}.
    """
    if not path:
        return DEFAULT_NODES

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"cannot read nodes file {path}: {e}") from e

    if isinstance(raw, list):
        raw = {"nodes": raw}
    try:
        table = NodeTable.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"invalid nodes file {path}: {e}") from e

    names = [n.name for n in table.nodes]
    if len(set(names)) != len(names):
        raise ConfigError(f"invalid nodes file {path}: duplicate node names")
    return tuple(table.nodes)
