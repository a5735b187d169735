"""Shared domain models for depininstaller."""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Mapping, Optional, Tuple

from .constants import AGENT_PORT, AUTH_DIR, AUTH_VOLUME, CONTAINER_NAME, DEFAULT_IMAGE_TAG


class OsKind(str, Enum):
    DEBIAN = "debian"
    FEDORA = "fedora"
    ARCH = "arch"
    OPENSUSE = "opensuse"
    MACOS = "macos"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class HostProfile:
    """Snapshot of host facts, read once per run."""

    cpu_threads: int
    mem_gb: int
    disk_free_gb: int
    os_kind: OsKind = OsKind.UNKNOWN
    has_docker: bool = False
    has_podman: bool = False
    local_ip: Optional[str] = None
    public_ip: Optional[str] = None
    arch: str = "x86_64"
    internet_reachable: bool = True
    needs_elevation: bool = False

    @property
    def engine_name(self) -> Optional[str]:
        if self.has_docker:
            return "docker"
        if self.has_podman:
            return "podman"
        return None


class Severity(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single host check."""

    name: str
    severity: Severity
    message: str
    hints: Tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return self.severity is Severity.OK


@dataclass(frozen=True)
class Verdict:
    """Aggregated outcome of every requirement check, in display order."""

    results: Tuple[CheckResult, ...] = ()

    @property
    def errors(self) -> Tuple[CheckResult, ...]:
        return tuple(r for r in self.results if r.severity is Severity.ERROR)

    @property
    def warnings(self) -> Tuple[CheckResult, ...]:
        return tuple(r for r in self.results if r.severity is Severity.WARNING)


@dataclass(frozen=True)
class Thresholds:
    min_cpu_threads: int = 2
    recommended_cpu_threads: int = 4
    min_mem_gb: int = 2
    recommended_mem_gb: int = 4
    min_disk_gb: int = 20


@dataclass(frozen=True)
class PortMapping:
    host_port: int
    container_port: int
    host_addr: Optional[str] = None
    protocol: str = "tcp"

    def to_arg(self) -> str:
        binding = f"{self.host_port}:{self.container_port}"
        if self.host_addr:
            binding = f"{self.host_addr}:{binding}"
        if self.protocol != "tcp":
            binding = f"{binding}/{self.protocol}"
        return binding


@dataclass(frozen=True)
class VolumeMount:
    volume_name: str
    container_path: str

    def to_arg(self) -> str:
        return f"type=volume,src={self.volume_name},dst={self.container_path}"


@dataclass(frozen=True)
class ContainerSpec:
    """Everything an engine needs to create or run one container."""

    name: Optional[str]
    image: str
    ports: FrozenSet[PortMapping] = frozenset()
    mounts: FrozenSet[VolumeMount] = frozenset()
    env: Mapping[str, str] = field(default_factory=dict)
    extra_args: Tuple[str, ...] = ()
    command: Tuple[str, ...] = ()
    platform: Optional[str] = None
    pull_always: bool = False
    restart_policy: Optional[str] = None


class RolloverStage(str, Enum):
    PREFLIGHT_NAME_CHECK = "preflight_name_check"
    CREATE_NEW = "create_new"
    STOP_OLD = "stop_old"
    START_NEW = "start_new"
    RENAME_OLD = "rename_old"
    RENAME_NEW = "rename_new"
    CLEANUP = "cleanup"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class RolloverState:
    """In-memory progress of one update; never persisted."""

    old_handle: str
    new_handle: Optional[str] = None
    stage: RolloverStage = RolloverStage.PREFLIGHT_NAME_CHECK
    failed_stage: Optional[RolloverStage] = None
    kept_old: bool = False


@dataclass(frozen=True)
class InstallOptions:
    """Operator choices resolved from CLI flags and the config file."""

    image_tag: str = DEFAULT_IMAGE_TAG
    subcommand: str = "install"
    auto_update: Optional[bool] = None
    ignore_warnings: bool = False
    assume_yes: bool = False
    container_name: str = CONTAINER_NAME
    auth_volume: str = AUTH_VOLUME
    auth_dir: str = AUTH_DIR
    agent_port: int = AGENT_PORT
