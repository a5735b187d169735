"""Container engine adapters for depininstaller."""

import shlex
import shutil
from typing import Callable, List, Optional, Sequence, Type

from rich.markup import escape

from depininstaller.errors import EngineError, NoRuntimeFound
from depininstaller.errors_catalog import actionable_error
from depininstaller.models import ContainerSpec, OsKind
from depininstaller.services.requirements import suggest_install


class ContainerEngine:
    """Runs container lifecycle commands against one engine binary.

    ``elevation`` is prepended to every command. It is decided once per
    process (see ``PrivilegeService``) and never changes afterwards.
    """

    binary = ""
    supports_restart_policy = False

    def __init__(self, runner, logger, console, elevation: Sequence[str] = ()):
        self.runner = runner
        self.logger = logger
        self.console = console
        self.elevation = tuple(elevation)

    @property
    def name(self) -> str:
        return self.binary

    def command(self, *args: str) -> List[str]:
        return [*self.elevation, self.binary, *args]

    def create(self, spec: ContainerSpec, clone_from: Optional[str] = None) -> str:
        self._execute("create", self.build_container_args(spec, clone_from=clone_from))
        return spec.name

    def run_detached(self, spec: ContainerSpec) -> str:
        self._execute("run", ["-d", *self.build_container_args(spec)])
        return spec.name

    def start(self, handle: str):
        self._execute("start", [handle])

    def stop(self, handle: str):
        self._execute("stop", [handle])

    def rename(self, handle: str, new_name: str):
        self._execute("rename", [handle, new_name])

    def remove(self, handle: str):
        self._execute("rm", [handle])

    def inspect(self, name: str) -> bool:
        result = self.runner.run(
            self.command("inspect", name),
            check=False,
            capture_output=True,
        )
        return result.returncode == 0

    def run_foreground(self, spec: ContainerSpec) -> int:
        cmd = self.command("run", "--rm", "-it", *self.build_container_args(spec))
        self._echo(cmd)
        result = self.runner.run(cmd, check=False, capture_output=False)
        return result.returncode

    def status_command(self) -> List[str]:
        return self.command("ps")

    def logs_command(self, name: str) -> List[str]:
        return self.command("logs", name)

    def build_container_args(
        self,
        spec: ContainerSpec,
        clone_from: Optional[str] = None,
    ) -> List[str]:
        args: List[str] = []

        for port in sorted(spec.ports, key=lambda p: (p.host_port, p.container_port, p.protocol)):
            args.extend(["-p", port.to_arg()])

        for mount in sorted(spec.mounts, key=lambda m: (m.volume_name, m.container_path)):
            args.extend(["--mount", mount.to_arg()])

        if spec.name:
            args.extend(["--name", spec.name])

        for key, value in spec.env.items():
            args.extend(["-e", f"{key}={value}"])

        if clone_from:
            args.append(f"--volumes-from={clone_from}")

        if spec.pull_always:
            args.append("--pull=always")

        if spec.restart_policy and self.supports_restart_policy:
            args.append(f"--restart={spec.restart_policy}")

        if spec.platform:
            args.extend(["--platform", spec.platform])

        args.extend(spec.extra_args)
        args.append(spec.image)
        args.extend(spec.command)
        return args

    def _execute(self, op: str, args: List[str]):
        cmd = self.command(op, *args)
        self._echo(cmd)
        result = self.runner.run(cmd, check=False, capture_output=True)
        if result.returncode != 0:
            raise EngineError(op, result.returncode, (result.stderr or "").strip())
        return result

    def _echo(self, cmd: List[str]):
        self.console.print(f"[dim]+ {escape(shlex.join(cmd))}[/dim]", highlight=False)


class DockerEngine(ContainerEngine):
    binary = "docker"
    supports_restart_policy = True


class PodmanEngine(ContainerEngine):
    binary = "podman"


ENGINES: Sequence[Type[ContainerEngine]] = (DockerEngine, PodmanEngine)


def find_engine_class(which: Callable[[str], object] = shutil.which) -> Optional[Type[ContainerEngine]]:
    """Returns the first installed engine, Docker before Podman."""
    for engine_cls in ENGINES:
        if which(engine_cls.binary):
            return engine_cls
    return None


def detect_engine_class(
    which: Callable[[str], object] = shutil.which,
    os_kind: OsKind = OsKind.UNKNOWN,
) -> Type[ContainerEngine]:
    engine_cls = find_engine_class(which)
    if engine_cls is not None:
        return engine_cls

    suggestions = (suggest_install("docker.io", os_kind), suggest_install("podman", os_kind))
    message = "\n".join([actionable_error("no_runtime"), *(f"  {line}" for line in suggestions)])
    raise NoRuntimeFound(message, suggestions=suggestions)
