import math
import struct
import time

from .models import Observation
from . import prompb

# value.StaleNaN from the Prometheus codebase: a signalling NaN that marks a
# series as stale. Only this exact bit pattern counts, not any NaN.
STALE_NAN_BITS = 0x7FF0000000000002
STALE_NAN = struct.unpack("<d", struct.pack("<Q", STALE_NAN_BITS))[0]

BYTES_PER_UNIT = 1024 * 1024

METRIC_TOTAL = "nan_test_metric_total"
METRIC_AVAILABLE = "nan_test_metric_available"


def float_bits(value: float) -> int:
    return struct.unpack("<Q", struct.pack("<d", value))[0]


def is_stale_nan(value: float) -> bool:
    return math.isnan(value) and float_bits(value) == STALE_NAN_BITS


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def value_or_stale(rng, probability: float, value: float) -> float:
    if rng.random() < probability:
        return STALE_NAN
    return value


# ================= METRICS =================
def generate(nodes, rng, clock=now_millis):
    """Fabricate one tick of observations, total then available per node."""
    observations = []
    for node in nodes:
        for metric, capacity in ((METRIC_TOTAL, node.total), (METRIC_AVAILABLE, node.available)):
            observations.append(
                Observation(
                    metric=metric,
                    instance=node.name,
                    value=value_or_stale(rng, node.stale_probability, float(capacity) * BYTES_PER_UNIT),
                    timestamp_ms=clock(),
                )
            )
    return observations


# ================= PAYLOAD =================
def build_write_request(observations):
    req = prompb.WriteRequest()
    for obs in observations:
        ts = req.timeseries.add()
        ts.labels.add(name="__name__", value=obs.metric)
        ts.labels.add(name="instance", value=obs.instance)
        ts.samples.add(value=obs.value, timestamp=obs.timestamp_ms)
    return req
