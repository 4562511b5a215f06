import sys
import time
import random
import logging
import argparse
from dataclasses import dataclass

from . import config, prompb
from .client import RemoteWriteClient
from .errors import NanpushError, StoreError
from .generator import generate, build_write_request, is_stale_nan

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    series: int
    stale: int
    bytes_sent: int
    duration: float


def fatal(outcome):
    """Default error policy: any failed tick ends the loop."""
    if isinstance(outcome, Exception):
        raise outcome


# ================= TICK =================
def build_payload(nodes, rng):
    observations = generate(nodes, rng)
    payload = prompb.encode(build_write_request(observations))
    stale = sum(1 for o in observations if is_stale_nan(o.value))
    return observations, stale, payload


def tick(nodes, client, rng):
    started = time.monotonic()
    observations, stale, payload = build_payload(nodes, rng)
    try:
        client.store(payload)
    except StoreError as e:
        raise StoreError(f"error storing: {e}", recoverable=e.recoverable) from e
    return TickResult(
        series=len(observations),
        stale=stale,
        bytes_sent=len(payload),
        duration=time.monotonic() - started,
    )


# ================= LOOP =================
def run(nodes, client, interval, rng, policy=fatal, max_ticks=None, sleep=time.sleep, clock=time.monotonic):
    """Push one batch immediately and then once per interval.

    Every tick's outcome, a TickResult or the NanpushError it raised, goes to
    `policy`; the loop stops when the policy raises. A send that overruns the
    interval is followed straight away by the next one, and the ticks it
    overran are dropped rather than caught up. Returns the number of ticks.
    """
    due = clock()
    ticks = 0
    while max_ticks is None or ticks < max_ticks:
        try:
            outcome = tick(nodes, client, rng)
        except NanpushError as e:
            outcome = e
        ticks += 1
        policy(outcome)
        if not isinstance(outcome, Exception):
            logger.info(
                "pushed metrics: %d series (%d stale), %d bytes in %.3fs",
                outcome.series, outcome.stale, outcome.bytes_sent, outcome.duration,
            )

        if max_ticks is not None and ticks >= max_ticks:
            break

        due += interval
        now = clock()
        if now < due:
            sleep(due - now)
            continue
        # the overrun tick fires at once, any further ones are dropped
        skipped = int((now - due) // interval)
        if skipped:
            logger.warning("send overran the interval, skipped %d tick(s)", skipped)
            due += skipped * interval
    return ticks


def log_level(name):
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise argparse.ArgumentTypeError(f"unknown log level {name!r}")
    return level


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="nanpush",
        description="Remote-write synthetic capacity series, randomly marked stale.",
    )
    p.add_argument("--url", default=config.REMOTE_WRITE_URL, help="remote write url")
    p.add_argument(
        "--send-interval",
        default=config.SEND_INTERVAL,
        help="interval how often series is remote written, e.g. 10s or 1m30s",
    )
    p.add_argument("--nodes-file", default=config.NODES_FILE, help="JSON node table replacing the built-in one")
    p.add_argument("--seed", type=int, default=None, help="seed for the stale marker draws")
    p.add_argument("--log-level", type=log_level, default=config.LOG_LEVEL)
    p.add_argument("--dry-run", action="store_true", help="encode one batch and exit without sending")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        interval = config.parse_duration(args.send_interval)
        nodes = config.load_nodes(args.nodes_file)
        rng = random.Random(args.seed if args.seed is not None else time.time_ns())

        if args.dry_run:
            observations, stale, payload = build_payload(nodes, rng)
            logger.info("dry run: %d series (%d stale), %d bytes", len(observations), stale, len(payload))
            return 0

        with RemoteWriteClient(args.url) as client:
            logger.info("starting: %d nodes, interval=%ss", len(nodes), interval)
            logger.info("sending metrics to %s", args.url)
            run(nodes, client, interval, rng)
    except NanpushError as e:
        logger.critical(e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("interrupted, stopping")
    return 0


if __name__ == "__main__":
    main()
