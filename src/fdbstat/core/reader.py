"""Atomic read of the status key and its read version."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import fdb

from fdbstat.errors import ReadFailure, StatusKeyMissing

logger = logging.getLogger("fdbstat.reader")

# Special-key-space key served by the cluster controller; not configurable.
STATUS_KEY = b"\xff\xff/status/json"

# fdb error codes surfaced by the client once its retry loop gives up.
_TIMED_OUT = 1031
_CANCELLED = 1025


@dataclass(frozen=True, slots=True)
class RawSnapshot:
    """Undecoded status payload and the version it was read at."""

    payload: bytes
    read_version: int

    def __iter__(self) -> Iterator[bytes | int]:
        # Allows ``payload, version = fetch_snapshot(db)``.
        yield self.payload
        yield self.read_version


def _read_status(tr, timeout_ms: int) -> RawSnapshot:
    if timeout_ms > 0:
        tr.options.set_timeout(timeout_ms)
    value = tr.get(STATUS_KEY)
    read_version = tr.get_read_version().wait()
    if not value.present():
        raise StatusKeyMissing(STATUS_KEY)
    return RawSnapshot(payload=bytes(value), read_version=int(read_version))


def fetch_snapshot(db, timeout: float | None = None) -> RawSnapshot:
    """Read the status payload and the read version in one transaction.

    Both reads go through the same read transaction, so the payload describes
    the cluster as of exactly ``read_version``. Transient errors are retried
    by the client's own ``fdb.transactional`` loop; anything that escapes it
    is raised as :class:`ReadFailure`.

    Args:
        db: An open ``fdb.Database`` (or a transaction to read within).
        timeout: Optional deadline in seconds applied to the transaction.
            Must be positive; sub-millisecond values are raised to 1 ms.
    """
    if timeout is None:
        timeout_ms = 0
    elif timeout > 0:
        timeout_ms = max(1, round(timeout * 1000))
    else:
        raise ValueError(f"timeout must be positive or None, got {timeout!r}")
    try:
        raw = fdb.transactional(_read_status)(db, timeout_ms)
    except StatusKeyMissing as exc:
        logger.warning("Status key %r is absent", STATUS_KEY)
        raise ReadFailure("status key is absent") from exc
    except fdb.FDBError as exc:
        if exc.code == _TIMED_OUT:
            reason = f"status read timed out after {timeout}s"
        elif exc.code == _CANCELLED:
            reason = "status read was cancelled"
        else:
            reason = "status read failed"
        logger.warning("%s (fdb error %d)", reason, exc.code)
        raise ReadFailure(reason) from exc

    logger.debug(
        "Read %d status bytes at version %d", len(raw.payload), raw.read_version
    )
    return raw
