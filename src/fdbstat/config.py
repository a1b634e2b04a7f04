"""Layered configuration: .fdbstat/config.toml -> FDBSTAT_* env vars -> defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib  # 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """fdb client settings."""

    api_version: int = 710
    cluster_file: str | None = None


@dataclass(frozen=True, slots=True)
class ReadConfig:
    """Status read settings. A timeout of 0 leaves the transaction unbounded."""

    timeout_seconds: float = 5.0


@dataclass(frozen=True, slots=True)
class FdbstatConfig:
    """Top-level configuration container."""

    project_path: Path = field(default_factory=Path.cwd)
    client: ClientConfig = field(default_factory=ClientConfig)
    read: ReadConfig = field(default_factory=ReadConfig)

    @property
    def config_dir(self) -> Path:
        return self.project_path / ".fdbstat"

    @property
    def config_path(self) -> Path:
        return self.config_dir / "config.toml"

    @classmethod
    def load(cls, project_path: Path | None = None) -> FdbstatConfig:
        """Load config with layering: TOML file -> env vars -> defaults."""
        project = Path(project_path) if project_path else Path.cwd()
        toml_path = project / ".fdbstat" / "config.toml"

        toml_data: dict = {}
        if toml_path.is_file():
            with open(toml_path, "rb") as f:
                toml_data = tomllib.load(f)

        client_data = toml_data.get("client", {})
        read_data = toml_data.get("read", {})

        # Use literal defaults (slots=True prevents class-level attribute access)
        _client_defaults = ClientConfig()
        _read_defaults = ReadConfig()

        cluster_file = os.environ.get(
            "FDBSTAT_CLUSTER_FILE",
            client_data.get("cluster_file", _client_defaults.cluster_file),
        )

        client = ClientConfig(
            api_version=int(
                os.environ.get(
                    "FDBSTAT_API_VERSION",
                    client_data.get("api_version", _client_defaults.api_version),
                )
            ),
            cluster_file=cluster_file or None,
        )

        read = ReadConfig(
            timeout_seconds=float(
                os.environ.get(
                    "FDBSTAT_TIMEOUT_SECONDS",
                    read_data.get("timeout_seconds", _read_defaults.timeout_seconds),
                )
            ),
        )

        return cls(project_path=project, client=client, read=read)
