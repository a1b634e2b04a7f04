"""Frozen dataclass models for the cluster status document.

Every modelled field carries its decode kind and, where the wire name differs
from the attribute name, its wire alias in the dataclass field metadata.
The decoder reads that table; it never infers behaviour from annotations.

Field layout follows the "mr-status" JSON format:
https://apple.github.io/foundationdb/mr-status.html#json-format
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from fdbstat.models.enums import Kind

# Frozen JSON value: str, int, float, bool, None, tuple or read-only mapping.
Opaque = Any


def _meta(kind: Kind, wire: str | None, item: Any = None) -> dict[str, Any]:
    return {"kind": kind, "wire": wire, "item": item}


def _empty_map() -> Mapping[str, Any]:
    return MappingProxyType({})


def _int(wire: str | None = None) -> Any:
    return field(default=0, metadata=_meta(Kind.INT, wire))


def _float(wire: str | None = None) -> Any:
    return field(default=0.0, metadata=_meta(Kind.FLOAT, wire))


def _str(wire: str | None = None) -> Any:
    return field(default="", metadata=_meta(Kind.STR, wire))


def _bool(wire: str | None = None) -> Any:
    return field(default=False, metadata=_meta(Kind.BOOL, wire))


def _record(cls: type, wire: str | None = None) -> Any:
    return field(default_factory=cls, metadata=_meta(Kind.RECORD, wire, cls))


def _list(item: type | Kind, wire: str | None = None) -> Any:
    return field(default=(), metadata=_meta(Kind.LIST, wire, item))


def _map(item: type | Kind, wire: str | None = None) -> Any:
    return field(default_factory=_empty_map, metadata=_meta(Kind.MAP, wire, item))


def _opaque(wire: str | None = None) -> Any:
    return field(default=None, metadata=_meta(Kind.OPAQUE, wire))


# ---------------------------------------------------------------------------
# Shared shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RateCounter:
    """Monotonic counter with its smoothed rate."""

    counter: int = _int()
    hz: float = _float()
    roughness: float = _float()


@dataclass(frozen=True, slots=True)
class Rate:
    hz: float = _float()


@dataclass(frozen=True, slots=True)
class DiskCounter:
    counter: int = _int()
    hz: float = _float()
    sectors: float = _float()


@dataclass(frozen=True, slots=True)
class Lag:
    """Lag expressed both in wall-clock seconds and in versions."""

    seconds: float = _float()
    versions: int = _int()


@dataclass(frozen=True, slots=True)
class Locality:
    data_hall: str = _str()
    machineid: str = _str()
    processid: str = _str()
    zoneid: str = _str()


@dataclass(frozen=True, slots=True)
class LatencyStatistics:
    count: int = _int()
    max: float = _float()
    mean: float = _float()
    median: float = _float()
    min: float = _float()
    p25: float = _float()
    p90: float = _float()
    p95: float = _float()
    p99: float = _float()
    p999: float = _float("p99.9")


@dataclass(frozen=True, slots=True)
class StorageMetadata:
    created_time_datetime: str = _str()
    created_time_timestamp: float = _float()


# ---------------------------------------------------------------------------
# Processes and machines
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RoleStatus:
    """Superset of every role variant; ``role`` names the variant.

    Fields that do not apply to the variant keep their zero value.
    """

    id: str = _str()
    role: str = _str()
    bytes_queried: RateCounter = _record(RateCounter)
    commit_latency_statistics: LatencyStatistics = _record(LatencyStatistics)
    data_lag: Lag = _record(Lag)
    data_version: int = _int()
    durability_lag: Lag = _record(Lag)
    durable_bytes: RateCounter = _record(RateCounter)
    durable_version: int = _int()
    fetched_versions: RateCounter = _record(RateCounter)
    fetches_from_logs: RateCounter = _record(RateCounter)
    finished_queries: RateCounter = _record(RateCounter)
    input_bytes: RateCounter = _record(RateCounter)
    keys_queried: RateCounter = _record(RateCounter)
    kvstore_available_bytes: int = _int()
    kvstore_free_bytes: int = _int()
    kvstore_inline_keys: int = _int()
    kvstore_total_bytes: int = _int()
    kvstore_total_nodes: int = _int()
    kvstore_total_size: int = _int()
    kvstore_used_bytes: int = _int()
    local_rate: int = _int()
    low_priority_queries: RateCounter = _record(RateCounter)
    mutation_bytes: RateCounter = _record(RateCounter)
    mutations: RateCounter = _record(RateCounter)
    query_queue_max: int = _int()
    queue_disk_available_bytes: int = _int()
    queue_disk_free_bytes: int = _int()
    queue_disk_total_bytes: int = _int()
    queue_disk_used_bytes: int = _int()
    read_latency_statistics: LatencyStatistics = _record(LatencyStatistics)
    storage_metadata: StorageMetadata = _record(StorageMetadata)
    stored_bytes: int = _int()
    total_queries: RateCounter = _record(RateCounter)


@dataclass(frozen=True, slots=True)
class ProcessCpu:
    usage_cores: float = _float()


@dataclass(frozen=True, slots=True)
class ProcessDisk:
    busy: float = _float()
    free_bytes: int = _int()
    reads: DiskCounter = _record(DiskCounter)
    total_bytes: int = _int()
    writes: DiskCounter = _record(DiskCounter)


@dataclass(frozen=True, slots=True)
class ProcessMemory:
    available_bytes: int = _int()
    limit_bytes: int = _int()
    rss_bytes: int = _int()
    unused_allocated_memory: int = _int()
    used_bytes: int = _int()


@dataclass(frozen=True, slots=True)
class ProcessNetwork:
    connection_errors: Rate = _record(Rate)
    connections_closed: Rate = _record(Rate)
    connections_established: Rate = _record(Rate)
    current_connections: int = _int()
    megabits_received: Rate = _record(Rate)
    megabits_sent: Rate = _record(Rate)
    tls_policy_failures: Rate = _record(Rate)


@dataclass(frozen=True, slots=True)
class ProcessStatus:
    """A single fdbserver process as reported by the cluster controller."""

    address: str = _str()
    class_source: str = _str()
    class_type: str = _str()
    command_line: str = _str()
    cpu: ProcessCpu = _record(ProcessCpu)
    disk: ProcessDisk = _record(ProcessDisk)
    excluded: bool = _bool()
    fault_domain: str = _str()
    locality: Locality = _record(Locality)
    machine_id: str = _str()
    memory: ProcessMemory = _record(ProcessMemory)
    messages: tuple[Opaque, ...] = _list(Kind.OPAQUE)
    network: ProcessNetwork = _record(ProcessNetwork)
    roles: tuple[RoleStatus, ...] = _list(RoleStatus)
    run_loop_busy: float = _float()
    uptime_seconds: float = _float()
    version: str = _str()

    def roles_named(self, name: str) -> tuple[RoleStatus, ...]:
        """Return the roles of this process whose ``role`` equals *name*."""
        return tuple(r for r in self.roles if r.role == name)

    def has_role(self, name: str) -> bool:
        return any(r.role == name for r in self.roles)


@dataclass(frozen=True, slots=True)
class MachineCpu:
    logical_core_utilization: float = _float()


@dataclass(frozen=True, slots=True)
class MachineMemory:
    committed_bytes: int = _int()
    free_bytes: int = _int()
    total_bytes: int = _int()


@dataclass(frozen=True, slots=True)
class MachineNetwork:
    megabits_received: Rate = _record(Rate)
    megabits_sent: Rate = _record(Rate)
    tcp_segments_retransmitted: Rate = _record(Rate)


@dataclass(frozen=True, slots=True)
class MachineStatus:
    """A host aggregating one or more processes."""

    id: str = _str()
    address: str = _str()
    contributing_workers: int = _int()
    cpu: MachineCpu = _record(MachineCpu)
    excluded: bool = _bool()
    locality: Locality = _record(Locality)
    machine_id: str = _str()
    memory: MachineMemory = _record(MachineMemory)
    network: MachineNetwork = _record(MachineNetwork)


# ---------------------------------------------------------------------------
# Client section
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ClusterFile:
    path: str = _str()
    up_to_date: bool = _bool()


@dataclass(frozen=True, slots=True)
class Coordinator:
    address: str = _str()
    protocol: str = _str()
    reachable: bool = _bool()


@dataclass(frozen=True, slots=True)
class Coordinators:
    coordinators: tuple[Coordinator, ...] = _list(Coordinator)
    quorum_reachable: bool = _bool()


@dataclass(frozen=True, slots=True)
class DatabaseStatus:
    available: bool = _bool()
    healthy: bool = _bool()


@dataclass(frozen=True, slots=True)
class ClientStatus:
    """The connecting client's view: cluster file, coordinators, availability."""

    cluster_file: ClusterFile = _record(ClusterFile)
    coordinators: Coordinators = _record(Coordinators)
    database_status: DatabaseStatus = _record(DatabaseStatus)
    messages: tuple[Opaque, ...] = _list(Kind.OPAQUE)
    timestamp: int = _int()


# ---------------------------------------------------------------------------
# Cluster section
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BounceImpact:
    can_clean_bounce: bool = _bool()


@dataclass(frozen=True, slots=True)
class ClientAddress:
    address: str = _str()
    log_group: str = _str()


@dataclass(frozen=True, slots=True)
class SupportedVersion:
    client_version: str = _str()
    connected_clients: tuple[ClientAddress, ...] = _list(ClientAddress)
    count: int = _int()
    max_protocol_clients: tuple[ClientAddress, ...] = _list(ClientAddress)
    max_protocol_count: int = _int()
    protocol_version: str = _str()
    source_version: str = _str()


@dataclass(frozen=True, slots=True)
class Clients:
    count: int = _int()
    supported_versions: tuple[SupportedVersion, ...] = _list(SupportedVersion)


@dataclass(frozen=True, slots=True)
class ExcludedServer:
    address: str = _str()


@dataclass(frozen=True, slots=True)
class Configuration:
    backup_worker_enabled: int = _int()
    blob_granules_enabled: int = _int()
    coordinators_count: int = _int()
    excluded_servers: tuple[ExcludedServer, ...] = _list(ExcludedServer)
    log_spill: int = _int()
    perpetual_storage_wiggle: int = _int()
    perpetual_storage_wiggle_engine: str = _str()
    perpetual_storage_wiggle_locality: str = _str()
    redundancy_mode: str = _str()
    storage_engine: str = _str()
    storage_migration_type: str = _str()
    tenant_mode: str = _str()
    usable_regions: int = _int()


@dataclass(frozen=True, slots=True)
class MovingData:
    highest_priority: int = _int()
    in_flight_bytes: int = _int()
    in_queue_bytes: int = _int()
    total_written_bytes: int = _int()


@dataclass(frozen=True, slots=True)
class DataState:
    healthy: bool = _bool()
    min_replicas_remaining: int = _int()
    name: str = _str()


@dataclass(frozen=True, slots=True)
class TeamTracker:
    in_flight_bytes: int = _int()
    primary: bool = _bool()
    state: DataState = _record(DataState)
    unhealthy_servers: int = _int()


@dataclass(frozen=True, slots=True)
class DataStatus:
    average_partition_size_bytes: int = _int()
    least_operating_space_bytes_log_server: int = _int()
    least_operating_space_bytes_storage_server: int = _int()
    moving_data: MovingData = _record(MovingData)
    partitions_count: int = _int()
    state: DataState = _record(DataState)
    system_kv_size_bytes: int = _int()
    team_trackers: tuple[TeamTracker, ...] = _list(TeamTracker)
    total_disk_used_bytes: int = _int()
    total_kv_size_bytes: int = _int()


@dataclass(frozen=True, slots=True)
class DatabaseLockState:
    locked: bool = _bool()


@dataclass(frozen=True, slots=True)
class FaultTolerance:
    max_zone_failures_without_losing_availability: int = _int()
    max_zone_failures_without_losing_data: int = _int()


@dataclass(frozen=True, slots=True)
class LatencyProbe:
    batch_priority_transaction_start_seconds: float = _float()
    commit_seconds: float = _float()
    immediate_priority_transaction_start_seconds: float = _float()
    read_seconds: float = _float()
    transaction_start_seconds: float = _float()


@dataclass(frozen=True, slots=True)
class BlobRecentIo:
    bytes_per_second: float = _float()
    bytes_sent: int = _int()
    requests_failed: int = _int()
    requests_successful: int = _int()


@dataclass(frozen=True, slots=True)
class BlobTotal:
    bytes_sent: int = _int()
    requests_failed: int = _int()
    requests_successful: int = _int()


@dataclass(frozen=True, slots=True)
class BlobStats:
    recent: BlobRecentIo = _record(BlobRecentIo)
    total: BlobTotal = _record(BlobTotal)


@dataclass(frozen=True, slots=True)
class BackupInstance:
    """One backup agent, keyed by instance id in ``BackupLayer.instances``."""

    blob_stats: BlobStats = _record(BlobStats)
    configured_workers: int = _int()
    id: str = _str()
    last_updated: float = _float()
    main_thread_cpu_seconds: float = _float()
    memory_usage: int = _int()
    process_cpu_seconds: float = _float()
    resident_size: int = _int()
    version: str = _str()


@dataclass(frozen=True, slots=True)
class BackupLayer:
    blob_recent_io: BlobRecentIo = _record(BlobRecentIo)
    instances: Mapping[str, BackupInstance] = _map(BackupInstance)
    instances_running: int = _int()
    last_updated: float = _float()
    paused: bool = _bool()
    tags: Opaque = _opaque()
    total_workers: int = _int()


@dataclass(frozen=True, slots=True)
class Layers:
    valid: bool = _bool("_valid")
    backup: BackupLayer = _record(BackupLayer)


@dataclass(frozen=True, slots=True)
class LogInterface:
    address: str = _str()
    healthy: bool = _bool()
    id: str = _str()


@dataclass(frozen=True, slots=True)
class LogGenerationStatus:
    """One transaction-log generation; ``ClusterStatus.logs`` keeps wire order."""

    begin_version: int = _int()
    current: bool = _bool()
    epoch: int = _int()
    log_fault_tolerance: int = _int()
    log_interfaces: tuple[LogInterface, ...] = _list(LogInterface)
    log_replication_factor: int = _int()
    log_write_anti_quorum: int = _int()
    possibly_losing_data: bool = _bool()


@dataclass(frozen=True, slots=True)
class PageCache:
    log_hit_rate: float = _float()
    storage_hit_rate: float = _float()


@dataclass(frozen=True, slots=True)
class LimitReason:
    description: str = _str()
    name: str = _str()
    reason_id: int = _int()


@dataclass(frozen=True, slots=True)
class ThrottledAuto:
    busy_read: int = _int()
    busy_write: int = _int()
    count: int = _int()
    recommended_only: int = _int()


@dataclass(frozen=True, slots=True)
class ThrottledManual:
    count: int = _int()


@dataclass(frozen=True, slots=True)
class ThrottledTags:
    auto: ThrottledAuto = _record(ThrottledAuto)
    manual: ThrottledManual = _record(ThrottledManual)


@dataclass(frozen=True, slots=True)
class Qos:
    """Ratekeeper view of throughput limits and the worst lagging servers."""

    batch_performance_limited_by: LimitReason = _record(LimitReason)
    batch_released_transactions_per_second: float = _float()
    batch_transactions_per_second_limit: float = _float()
    limiting_data_lag_storage_server: Lag = _record(Lag)
    limiting_durability_lag_storage_server: Lag = _record(Lag)
    limiting_queue_bytes_storage_server: int = _int()
    performance_limited_by: LimitReason = _record(LimitReason)
    released_transactions_per_second: float = _float()
    throttled_tags: ThrottledTags = _record(ThrottledTags)
    transactions_per_second_limit: float = _float()
    worst_data_lag_storage_server: Lag = _record(Lag)
    worst_durability_lag_storage_server: Lag = _record(Lag)
    worst_queue_bytes_log_server: int = _int()
    worst_queue_bytes_storage_server: int = _int()


@dataclass(frozen=True, slots=True)
class RecoveryState:
    active_generations: int = _int()
    description: str = _str()
    name: str = _str()
    seconds_since_last_recovered: float = _float()


@dataclass(frozen=True, slots=True)
class WorkloadBytes:
    read: RateCounter = _record(RateCounter)
    written: RateCounter = _record(RateCounter)


@dataclass(frozen=True, slots=True)
class WorkloadKeys:
    read: RateCounter = _record(RateCounter)


@dataclass(frozen=True, slots=True)
class WorkloadOperations:
    location_requests: RateCounter = _record(RateCounter)
    low_priority_reads: RateCounter = _record(RateCounter)
    memory_errors: RateCounter = _record(RateCounter)
    read_requests: RateCounter = _record(RateCounter)
    reads: RateCounter = _record(RateCounter)
    writes: RateCounter = _record(RateCounter)


@dataclass(frozen=True, slots=True)
class WorkloadTransactions:
    committed: RateCounter = _record(RateCounter)
    conflicted: RateCounter = _record(RateCounter)
    rejected_for_queued_too_long: RateCounter = _record(RateCounter)
    started: RateCounter = _record(RateCounter)
    started_batch_priority: RateCounter = _record(RateCounter)
    started_default_priority: RateCounter = _record(RateCounter)
    started_immediate_priority: RateCounter = _record(RateCounter)


@dataclass(frozen=True, slots=True)
class Workload:
    bytes: WorkloadBytes = _record(WorkloadBytes)
    keys: WorkloadKeys = _record(WorkloadKeys)
    operations: WorkloadOperations = _record(WorkloadOperations)
    transactions: WorkloadTransactions = _record(WorkloadTransactions)


@dataclass(frozen=True, slots=True)
class ClusterStatus:
    """The cluster's self-reported state."""

    active_primary_dc: str = _str()
    active_tss_count: int = _int()
    bounce_impact: BounceImpact = _record(BounceImpact)
    clients: Clients = _record(Clients)
    cluster_controller_timestamp: int = _int()
    configuration: Configuration = _record(Configuration)
    connection_string: str = _str()
    data: DataStatus = _record(DataStatus)
    database_available: bool = _bool()
    database_lock_state: DatabaseLockState = _record(DatabaseLockState)
    datacenter_lag: Lag = _record(Lag)
    degraded_processes: int = _int()
    fault_tolerance: FaultTolerance = _record(FaultTolerance)
    full_replication: bool = _bool()
    generation: int = _int()
    incompatible_connections: tuple[Opaque, ...] = _list(Kind.OPAQUE)
    latency_probe: LatencyProbe = _record(LatencyProbe)
    layers: Layers = _record(Layers)
    logs: tuple[LogGenerationStatus, ...] = _list(LogGenerationStatus)
    machines: Mapping[str, MachineStatus] = _map(MachineStatus)
    messages: tuple[Opaque, ...] = _list(Kind.OPAQUE)
    page_cache: PageCache = _record(PageCache)
    processes: Mapping[str, ProcessStatus] = _map(ProcessStatus)
    protocol_version: str = _str()
    qos: Qos = _record(Qos)
    recovery_state: RecoveryState = _record(RecoveryState)
    workload: Workload = _record(Workload)

    def processes_with_role(self, name: str) -> dict[str, ProcessStatus]:
        """Return the processes holding at least one role named *name*."""
        return {pid: p for pid, p in self.processes.items() if p.has_role(name)}

    def current_log_generation(self) -> LogGenerationStatus | None:
        for gen in self.logs:
            if gen.current:
                return gen
        return None


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Decoded status document captured at ``read_version``.

    ``read_version`` carries no field metadata: it is never read from the
    document and is injected by the decoder.
    """

    read_version: int = 0
    client: ClientStatus = _record(ClientStatus)
    cluster: ClusterStatus = _record(ClusterStatus)
