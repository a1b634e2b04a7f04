"""fdbstat data models."""

from fdbstat.models.enums import Kind, RoleName
from fdbstat.models.status import (
    ClientStatus,
    ClusterStatus,
    Lag,
    LatencyStatistics,
    LogGenerationStatus,
    MachineStatus,
    ProcessStatus,
    Rate,
    RateCounter,
    RoleStatus,
    StatusSnapshot,
)

__all__ = [
    "Kind",
    "RoleName",
    "StatusSnapshot",
    "ClientStatus",
    "ClusterStatus",
    "ProcessStatus",
    "MachineStatus",
    "RoleStatus",
    "LogGenerationStatus",
    "RateCounter",
    "Rate",
    "Lag",
    "LatencyStatistics",
]
