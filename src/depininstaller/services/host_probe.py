"""Reads host facts and builds the HostProfile consumed by the requirement gate."""

import os
import platform
import shutil
import socket
from typing import Callable, Dict, Optional

import requests

from depininstaller.constants import (
    CONNECTIVITY_TIMEOUT,
    CONNECTIVITY_URL,
    MEMINFO_PATH,
    OS_RELEASE_PATH,
    PUBLIC_IP_TIMEOUT,
    PUBLIC_IP_URL,
)
from depininstaller.errors import InstallerError
from depininstaller.models import HostProfile, OsKind

_OS_IDS = {
    "debian": OsKind.DEBIAN,
    "ubuntu": OsKind.DEBIAN,
    "fedora": OsKind.FEDORA,
    "arch": OsKind.ARCH,
    "opensuse": OsKind.OPENSUSE,
}

# Any address outside the local network works; nothing is sent over a UDP connect.
_ROUTE_PROBE_ADDR = ("1.0.0.0", 80)


def parse_os_release(content: str) -> Dict[str, str]:
    values = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip().strip("\"'")
    return values


def os_kind_from_release(values: Dict[str, str]) -> OsKind:
    candidates = [values.get("ID", "")]
    candidates.extend(values.get("ID_LIKE", "").split())

    for candidate in candidates:
        candidate = candidate.lower()
        if candidate in _OS_IDS:
            return _OS_IDS[candidate]
        if candidate.startswith("opensuse"):
            return OsKind.OPENSUSE
    return OsKind.UNKNOWN


class HostProbeService:
    """Collects CPU, memory, disk, runtime and network facts about the host."""

    def __init__(
        self,
        runner,
        logger,
        requests_module=requests,
        which: Callable[[str], Optional[str]] = shutil.which,
        platform_module=platform,
        socket_module=socket,
        os_release_path: str = OS_RELEASE_PATH,
        meminfo_path: str = MEMINFO_PATH,
        disk_path: str = "/",
    ):
        self.runner = runner
        self.logger = logger
        self.requests = requests_module
        self.which = which
        self.platform = platform_module
        self.socket = socket_module
        self.os_release_path = os_release_path
        self.meminfo_path = meminfo_path
        self.disk_path = disk_path

    def detect_os(self) -> OsKind:
        try:
            with open(self.os_release_path, "r", encoding="utf-8") as file_obj:
                kind = os_kind_from_release(parse_os_release(file_obj.read()))
        except OSError:
            kind = OsKind.UNKNOWN

        if kind is OsKind.UNKNOWN and self.platform.system() == "Darwin":
            return OsKind.MACOS
        return kind

    def detect_arch(self) -> str:
        return self.platform.machine() or "unknown"

    def has_command(self, name: str) -> bool:
        return self.which(name) is not None

    def cpu_threads(self) -> int:
        if hasattr(os, "sched_getaffinity"):
            return len(os.sched_getaffinity(0))
        return os.cpu_count() or 0

    def memory_gb(self, os_kind: OsKind) -> int:
        if os_kind is OsKind.MACOS:
            total_kb = self._sysctl_memsize_kb()
        else:
            total_kb = self._meminfo_total_kb()
        return total_kb // 1024 // 1024

    def _sysctl_memsize_kb(self) -> int:
        result = self.runner.run(["sysctl", "-n", "hw.memsize"], capture_output=True)
        try:
            return int((result.stdout or "").strip()) // 1024
        except ValueError as exc:
            raise InstallerError(f"Could not read total memory from sysctl: {exc}") from exc

    def _meminfo_total_kb(self) -> int:
        try:
            with open(self.meminfo_path, "r", encoding="utf-8") as file_obj:
                for line in file_obj:
                    if line.startswith("MemTotal:"):
                        return int(line.split()[1])
        except (OSError, ValueError, IndexError) as exc:
            raise InstallerError(f"Could not read total memory from {self.meminfo_path}: {exc}") from exc
        raise InstallerError(f"MemTotal not found in {self.meminfo_path}.")

    def disk_free_gb(self) -> int:
        usage = shutil.disk_usage(self.disk_path)
        return usage.free // 1024 // 1024 // 1024

    def internet_reachable(self) -> bool:
        try:
            response = self.requests.head(
                CONNECTIVITY_URL,
                timeout=CONNECTIVITY_TIMEOUT,
                allow_redirects=False,
            )
            response.close()
            return True
        except self.requests.RequestException as exc:
            self.logger.debug("Connectivity probe failed: %s", exc)
            return False

    def public_ip(self) -> Optional[str]:
        try:
            response = self.requests.get(PUBLIC_IP_URL, timeout=PUBLIC_IP_TIMEOUT)
            response.raise_for_status()
        except self.requests.RequestException as exc:
            self.logger.debug("Public IP lookup failed: %s", exc)
            return None
        return response.text.strip() or None

    def local_ip(self) -> Optional[str]:
        sock = self.socket.socket(self.socket.AF_INET, self.socket.SOCK_DGRAM)
        try:
            sock.connect(_ROUTE_PROBE_ADDR)
            return sock.getsockname()[0]
        except OSError as exc:
            self.logger.debug("Local IP lookup failed: %s", exc)
            return None
        finally:
            sock.close()

    def build_profile(self, os_kind: Optional[OsKind] = None, needs_elevation: bool = False) -> HostProfile:
        os_kind = os_kind or self.detect_os()
        return HostProfile(
            cpu_threads=self.cpu_threads(),
            mem_gb=self.memory_gb(os_kind),
            disk_free_gb=self.disk_free_gb(),
            os_kind=os_kind,
            has_docker=self.has_command("docker"),
            has_podman=self.has_command("podman"),
            local_ip=self.local_ip(),
            public_ip=self.public_ip(),
            arch=self.detect_arch(),
            internet_reachable=self.internet_reachable(),
            needs_elevation=needs_elevation,
        )
