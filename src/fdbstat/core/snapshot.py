"""Open the database and compose the read and decode stages."""

from __future__ import annotations

import logging

import fdb

from fdbstat.config import ClientConfig, FdbstatConfig, ReadConfig
from fdbstat.core.decoder import decode
from fdbstat.core.reader import fetch_snapshot
from fdbstat.errors import ReadFailure
from fdbstat.models.status import StatusSnapshot

logger = logging.getLogger("fdbstat.snapshot")


def open_database(config: FdbstatConfig | None = None):
    """Select the client API version and open the configured cluster."""
    client = config.client if config else ClientConfig()

    try:
        fdb.api_version(client.api_version)
    except (RuntimeError, OSError) as exc:
        raise ReadFailure(
            f"cannot load fdb client at API version {client.api_version}"
        ) from exc

    try:
        db = fdb.open(client.cluster_file)
    except fdb.FDBError as exc:
        raise ReadFailure(
            f"cannot open cluster file {client.cluster_file or '(default)'}"
        ) from exc

    logger.debug("Opened cluster %s", client.cluster_file or "(default)")
    return db


def get_status(db, timeout: float | None = None) -> StatusSnapshot:
    """Fetch and decode one status snapshot."""
    raw = fetch_snapshot(db, timeout=timeout)
    return decode(raw.payload, raw.read_version)


def capture_status(
    config: FdbstatConfig | None = None,
    db=None,
) -> StatusSnapshot:
    """Open the database from *config* (unless given) and take a snapshot."""
    read = config.read if config else ReadConfig()
    if db is None:
        db = open_database(config)
    timeout = read.timeout_seconds if read.timeout_seconds > 0 else None
    return get_status(db, timeout=timeout)
