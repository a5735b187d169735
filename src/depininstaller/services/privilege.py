"""Decides whether container engine commands need sudo."""

import grp
import os
import pwd
from typing import Mapping, Optional, Tuple

from depininstaller.constants import (
    DOCKER_ROOTLESS_LINK,
    DOCKER_SOCKET_PATH,
    PODMAN_ROOTLESS_LINK,
    SUBGID_PATH,
    SUBUID_PATH,
)
from depininstaller.models import OsKind

DOCKER_ELEVATION = ("sudo", "-g", "docker")
PODMAN_ELEVATION = ("sudo",)

ROOTLESS_LINKS = {
    "docker": DOCKER_ROOTLESS_LINK,
    "podman": PODMAN_ROOTLESS_LINK,
}


class PrivilegeService:
    """Resolves the command prefix used to reach the engine.

    Docker and Podman on macOS run inside a Linux VM and their clients
    never need root.
    """

    def __init__(
        self,
        logger,
        environ: Optional[Mapping[str, str]] = None,
        docker_socket: str = DOCKER_SOCKET_PATH,
        subuid_path: str = SUBUID_PATH,
        subgid_path: str = SUBGID_PATH,
    ):
        self.logger = logger
        self.environ = os.environ if environ is None else environ
        self.docker_socket = docker_socket
        self.subuid_path = subuid_path
        self.subgid_path = subgid_path

    def elevation_prefix(self, engine_name: Optional[str], os_kind: OsKind) -> Tuple[str, ...]:
        if engine_name is None or os_kind is OsKind.MACOS:
            return ()

        if engine_name == "docker":
            if self._in_group("docker") or self._docker_socket_writable():
                return ()
            return DOCKER_ELEVATION

        if engine_name == "podman":
            if self._has_subordinate_ids():
                return ()
            return PODMAN_ELEVATION

        return ()

    def _user_name(self) -> str:
        user = self.environ.get("USER")
        if user:
            return user
        return pwd.getpwuid(os.getuid()).pw_name

    def _group_name(self) -> str:
        return grp.getgrgid(os.getgid()).gr_name

    def _in_group(self, group_name: str) -> bool:
        try:
            group = grp.getgrnam(group_name)
        except KeyError:
            return False

        return group.gr_gid in os.getgroups() or self._user_name() in group.gr_mem

    def _docker_socket_writable(self) -> bool:
        docker_host = self.environ.get("DOCKER_HOST", "")
        if docker_host.startswith("unix://"):
            docker_host = docker_host[len("unix://"):]

        for candidate in (docker_host, self.docker_socket):
            if candidate and os.access(candidate, os.W_OK):
                return True
        return False

    def _has_subordinate_ids(self) -> bool:
        user_name = self._user_name()
        group_name = self._group_name()
        if not user_name or not group_name:
            return False
        return self._has_entry(self.subuid_path, user_name) and self._has_entry(
            self.subgid_path, group_name
        )

    def _has_entry(self, path: str, name: str) -> bool:
        try:
            with open(path, "r", encoding="utf-8") as file_obj:
                return any(line.startswith(f"{name}:") for line in file_obj)
        except OSError as exc:
            self.logger.debug("Could not read %s: %s", path, exc)
            return False
