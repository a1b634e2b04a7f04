"""Shared fixtures: an in-memory stand-in for the fdb client and a status document."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

STATUS_KEY = b"\xff\xff/status/json"


class FakeFDBError(Exception):
    def __init__(self, code: int) -> None:
        super().__init__(f"fdb error {code}")
        self.code = code


class FakeFuture:
    def __init__(self, value):
        self._value = value

    def wait(self):
        return self._value


class FakeValue:
    """Mimics ``fdb.Value``: a future that is bytes-like when present."""

    def __init__(self, value: bytes | None) -> None:
        self._value = value

    def present(self) -> bool:
        return self._value is not None

    def __bytes__(self) -> bytes:
        return self._value


class FakeTransaction:
    def __init__(self, db, read_version: int) -> None:
        self._db = db
        self.read_version = read_version
        self.options = MagicMock()
        self.reads: list = []

    def get_read_version(self):
        self.reads.append("read_version")
        return FakeFuture(self.read_version)

    def get(self, key):
        self.reads.append(key)
        if self._db.error is not None:
            raise self._db.error
        return FakeValue(self._db.data.get(key))


class FakeDatabase:
    """Static cluster: every transaction sees the same data."""

    def __init__(self, payload: bytes | None, read_version: int = 1000) -> None:
        self.data = {STATUS_KEY: payload} if payload is not None else {}
        self.read_version = read_version
        self.error: Exception | None = None
        self.transactions: list[FakeTransaction] = []

    def create_transaction(self) -> FakeTransaction:
        tr = FakeTransaction(self, self.read_version)
        self.transactions.append(tr)
        self.read_version += 1
        return tr


def fake_transactional(func):
    """Single attempt per call; tests count calls to detect extra retries.

    Like ``fdb.transactional``, a transaction passed in is used as is.
    """

    def wrapper(db_or_tr, *args, **kwargs):
        fake_transactional.calls += 1
        if isinstance(db_or_tr, FakeTransaction):
            return func(db_or_tr, *args, **kwargs)
        tr = db_or_tr.create_transaction()
        return func(tr, *args, **kwargs)

    return wrapper


fake_transactional.calls = 0


@pytest.fixture
def fake_fdb(monkeypatch):
    fake_transactional.calls = 0
    module = SimpleNamespace(
        transactional=fake_transactional,
        FDBError=FakeFDBError,
        api_version=MagicMock(),
        open=MagicMock(),
    )
    monkeypatch.setattr("fdbstat.core.reader.fdb", module)
    monkeypatch.setattr("fdbstat.core.snapshot.fdb", module)
    return module


def _counter(counter, hz, roughness):
    return {"counter": counter, "hz": hz, "roughness": roughness}


SAMPLE_STATUS = {
    "client": {
        "cluster_file": {"path": "/etc/foundationdb/fdb.cluster", "up_to_date": True},
        "coordinators": {
            "coordinators": [
                {"address": "10.0.0.1:4500", "protocol": "0fdb00b071010000", "reachable": True},
                {"address": "10.0.0.2:4500", "protocol": "0fdb00b071010000", "reachable": False},
            ],
            "quorum_reachable": True,
        },
        "database_status": {"available": True, "healthy": True},
        "messages": [],
        "timestamp": 1700000000,
    },
    "cluster": {
        "active_primary_dc": "dc1",
        "active_tss_count": 0,
        "bounce_impact": {"can_clean_bounce": True},
        "clients": {
            "count": 3,
            "supported_versions": [
                {
                    "client_version": "7.1.33",
                    "connected_clients": [{"address": "10.0.1.5:51234", "log_group": "default"}],
                    "count": 1,
                    "max_protocol_clients": [],
                    "max_protocol_count": 1,
                    "protocol_version": "fdb00b071010000",
                    "source_version": "abc123",
                }
            ],
        },
        "cluster_controller_timestamp": 1700000001,
        "configuration": {
            "coordinators_count": 3,
            "excluded_servers": [{"address": "10.0.0.9"}],
            "log_spill": 2,
            "redundancy_mode": "double",
            "storage_engine": "ssd-2",
            "usable_regions": 1,
        },
        "connection_string": "test:abc@10.0.0.1:4500,10.0.0.2:4500",
        "data": {
            "moving_data": {"highest_priority": 0, "in_flight_bytes": 0, "in_queue_bytes": 0},
            "partitions_count": 14,
            "state": {"healthy": True, "min_replicas_remaining": 2, "name": "healthy"},
            "team_trackers": [
                {
                    "in_flight_bytes": 0,
                    "primary": True,
                    "state": {"healthy": True, "min_replicas_remaining": 2, "name": "healthy"},
                    "unhealthy_servers": 0,
                }
            ],
            "total_kv_size_bytes": 9007199254740993,
        },
        "database_available": True,
        "database_lock_state": {"locked": False},
        "datacenter_lag": {"seconds": 0.0, "versions": 0},
        "degraded_processes": 0,
        "fault_tolerance": {
            "max_zone_failures_without_losing_availability": 1,
            "max_zone_failures_without_losing_data": 1,
        },
        "full_replication": True,
        "generation": 42,
        "incompatible_connections": [],
        "latency_probe": {"commit_seconds": 0.0042, "read_seconds": 0.0007},
        "layers": {
            "_valid": True,
            "backup": {
                "blob_recent_io": {"bytes_per_second": 0, "bytes_sent": 0},
                "instances": {
                    "inst-a": {
                        "blob_stats": {
                            "recent": {"bytes_per_second": 12.5, "bytes_sent": 100},
                            "total": {"bytes_sent": 1000, "requests_failed": 1},
                        },
                        "configured_workers": 10,
                        "id": "inst-a",
                        "last_updated": 1700000000.5,
                        "version": "7.1.33",
                    }
                },
                "instances_running": 1,
                "paused": False,
                "tags": {"default": {"running_backup": False}},
                "total_workers": 10,
            },
        },
        "logs": [
            {"begin_version": 100, "current": False, "epoch": 6, "log_interfaces": []},
            {
                "begin_version": 500,
                "current": True,
                "epoch": 7,
                "log_fault_tolerance": 1,
                "log_interfaces": [
                    {"address": "10.0.0.1:4500", "healthy": True, "id": "aa11"},
                ],
                "log_replication_factor": 2,
                "log_write_anti_quorum": 0,
                "possibly_losing_data": False,
            },
        ],
        "machines": {
            "m1": {
                "address": "10.0.0.1",
                "contributing_workers": 2,
                "cpu": {"logical_core_utilization": 0.25},
                "excluded": False,
                "locality": {"machineid": "m1", "zoneid": "z1"},
                "machine_id": "m1",
                "memory": {"committed_bytes": 1024, "free_bytes": 2048, "total_bytes": 4096},
                "network": {"megabits_received": {"hz": 1.5}, "megabits_sent": {"hz": 2.5}},
            }
        },
        "messages": [
            {"name": "unreachable_processes", "description": "1 process unreachable", "unreachable_processes": [{"address": "10.0.0.3:4500"}]},
            "plain string message",
        ],
        "page_cache": {"log_hit_rate": 1, "storage_hit_rate": 0.98},
        "processes": {
            "p1": {
                "address": "10.0.0.1:4500",
                "class_source": "command_line",
                "class_type": "storage",
                "command_line": "/usr/sbin/fdbserver --class=storage",
                "cpu": {"usage_cores": 0.5},
                "disk": {
                    "busy": 0.1,
                    "free_bytes": 500,
                    "reads": {"counter": 10, "hz": 1.0, "sectors": 8.0},
                    "total_bytes": 1000,
                    "writes": {"counter": 20, "hz": 2.0, "sectors": 16.0},
                },
                "excluded": False,
                "fault_domain": "m1",
                "locality": {"machineid": "m1", "processid": "p1", "zoneid": "z1"},
                "machine_id": "m1",
                "memory": {"available_bytes": 100, "limit_bytes": 200, "rss_bytes": 104857600, "used_bytes": 90},
                "messages": [{"name": "file_open_error", "time": 1.5}],
                "network": {"current_connections": 7, "megabits_sent": {"hz": 0.5}},
                "roles": [
                    {
                        "id": "ss1",
                        "role": "storage",
                        "bytes_queried": _counter(123456789012, 10.5, 1.2),
                        "data_lag": {"seconds": 0.5, "versions": 500000},
                        "durability_lag": {"seconds": 5.1, "versions": 5100000},
                        "input_bytes": _counter(99, 1.0, 0.0),
                        "kvstore_used_bytes": 4096,
                        "query_queue_max": 3,
                        "read_latency_statistics": {"count": 10, "median": 0.001, "p99": 0.01, "p99.9": 0.02},
                        "storage_metadata": {"created_time_datetime": "2024-01-01 00:00:00", "created_time_timestamp": 1704067200.0},
                        "stored_bytes": 8192,
                    },
                    {
                        "id": "log1",
                        "role": "log",
                        "input_bytes": _counter(77, 2.0, 0.5),
                        "queue_disk_used_bytes": 2048,
                    },
                ],
                "run_loop_busy": 0.2,
                "uptime_seconds": 3600.5,
                "version": "7.1.33",
                "future_field": {"nested": True},
            },
            "p2": {
                "address": "10.0.0.2:4500",
                "class_type": "stateless",
                "roles": [{"id": "cc", "role": "cluster_controller"}],
            },
        },
        "protocol_version": "fdb00b071010000",
        "qos": {
            "performance_limited_by": {"description": "The database is not being saturated", "name": "workload", "reason_id": 2},
            "released_transactions_per_second": 120.5,
            "worst_data_lag_storage_server": {"seconds": 0.5, "versions": 500000},
            "throttled_tags": {"auto": {"count": 0}, "manual": {"count": 1}},
            "worst_queue_bytes_log_server": 1024,
        },
        "recovery_state": {
            "active_generations": 1,
            "description": "Recovery complete.",
            "name": "fully_recovered",
            "seconds_since_last_recovered": 1234.5,
        },
        "workload": {
            "bytes": {"read": _counter(1000, 10.0, 1.0), "written": _counter(2000, 20.0, 2.0)},
            "keys": {"read": _counter(30, 3.0, 0.3)},
            "operations": {
                "reads": _counter(40, 4.0, 0.4),
                "writes": _counter(50, 5.0, 0.5),
                "read_requests": _counter(41, 4.1, 0.41),
            },
            "transactions": {
                "committed": _counter(60, 6.0, 0.6),
                "conflicted": _counter(1, 0.1, 0.01),
                "started": _counter(70, 7.0, 0.7),
            },
        },
        "unmodelled_section": {"anything": [1, 2, 3]},
    },
}


@pytest.fixture
def sample_status() -> dict:
    return json.loads(json.dumps(SAMPLE_STATUS))


@pytest.fixture
def sample_payload() -> bytes:
    return json.dumps(SAMPLE_STATUS).encode("utf-8")
