"""Enumerations for fdbstat status models."""

from enum import Enum


class RoleName(str, Enum):
    """Role names reported in a process's ``roles`` list."""

    STORAGE = "storage"
    LOG = "log"
    MASTER = "master"
    PROXY = "proxy"
    COMMIT_PROXY = "commit_proxy"
    GRV_PROXY = "grv_proxy"
    RESOLVER = "resolver"
    CLUSTER_CONTROLLER = "cluster_controller"
    DATA_DISTRIBUTOR = "data_distributor"
    RATEKEEPER = "ratekeeper"
    COORDINATOR = "coordinator"


class Kind(str, Enum):
    """Decode kind of a modelled field, independent of its Python annotation."""

    INT = "int"
    FLOAT = "float"
    STR = "str"
    BOOL = "bool"
    RECORD = "record"
    LIST = "list"
    MAP = "map"
    OPAQUE = "opaque"
