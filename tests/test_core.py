import dataclasses
import subprocess

import pytest

from depininstaller.core import InstallerError, WorkerInstaller
from depininstaller.errors import NoRuntimeFound
from depininstaller.models import HostProfile, InstallOptions, OsKind


class FakeProbe:
    def __init__(self, profile):
        self.profile = profile

    def detect_os(self):
        return self.profile.os_kind

    def has_command(self, name):
        return (name == "docker" and self.profile.has_docker) or (
            name == "podman" and self.profile.has_podman
        )

    def build_profile(self, os_kind=None, needs_elevation=False):
        return dataclasses.replace(self.profile, needs_elevation=needs_elevation)


class FakePrivilege:
    def __init__(self, prefix=()):
        self.prefix = prefix

    def elevation_prefix(self, engine_name, os_kind):
        return self.prefix if engine_name else ()


class FakeRunner:
    """Answers engine commands; ``responses`` maps a subcommand to an exit status."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.commands = []

    def run(self, cmd, check=True, capture_output=False, timeout=None):
        self.commands.append(cmd)
        key = cmd[1]
        if key == "run":
            key = "run -it" if "-it" in cmd else "run -d"
        if key == "inspect":
            key = f"inspect {cmd[2]}"
        returncode = self.responses.get(key, 0)
        return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr="")

    def subcommands(self):
        return [cmd[1] for cmd in self.commands]


class ScriptedPrompter:
    def __init__(self, answers=(), interactive=True):
        self.answers = list(answers)
        self.interactive = interactive
        self.questions = []

    def is_interactive(self):
        return self.interactive

    def confirm(self, question, default):
        self.questions.append(question)
        return self.answers.pop(0)


GOOD_HOST = HostProfile(
    cpu_threads=8,
    mem_gb=16,
    disk_free_gb=100,
    os_kind=OsKind.DEBIAN,
    has_docker=True,
    local_ip="203.0.113.7",
    public_ip="203.0.113.7",
)


def build_installer(profile=GOOD_HOST, runner=None, prompter=None, **options):
    values = dict(assume_yes=True, auto_update=False)
    values.update(options)
    return WorkerInstaller(
        options=InstallOptions(**values),
        prompter=prompter or ScriptedPrompter(interactive=False),
        runner=runner or FakeRunner(),
        probe=FakeProbe(profile),
        privilege_service=FakePrivilege(),
    )


def test_unknown_subcommand_is_rejected():
    with pytest.raises(InstallerError, match="Unknown subcommand"):
        build_installer(subcommand="uninstall")


def test_install_runs_setup_then_detached_worker():
    runner = FakeRunner()

    assert build_installer(runner=runner).run() == 0

    setup_cmd, run_cmd = runner.commands
    assert setup_cmd[:4] == ["docker", "run", "--rm", "-it"]
    assert setup_cmd[-2:] == ["interactive-setup", "/home/worker/auth"]
    assert run_cmd[:3] == ["docker", "run", "-d"]
    assert "--agent-public-addr=203.0.113.7:39065" in run_cmd


def test_failing_requirements_exit_before_engine_calls():
    runner = FakeRunner()
    prompter = ScriptedPrompter(interactive=True)
    profile = HostProfile(cpu_threads=8, mem_gb=16, disk_free_gb=5)

    assert build_installer(profile=profile, runner=runner, prompter=prompter).run() == 1
    assert runner.commands == []
    assert prompter.questions == []


def test_warnings_without_terminal_or_force_flag_fail():
    runner = FakeRunner()
    profile = dataclasses.replace(GOOD_HOST, cpu_threads=2, mem_gb=2, disk_free_gb=25)

    assert build_installer(profile=profile, runner=runner, assume_yes=False).run() == 1
    assert runner.commands == []


def test_declining_after_warnings_exits_cleanly():
    runner = FakeRunner()
    profile = dataclasses.replace(GOOD_HOST, cpu_threads=2)
    prompter = ScriptedPrompter(answers=[False])

    installer = build_installer(profile=profile, runner=runner, prompter=prompter, assume_yes=False)

    assert installer.run() == 0
    assert prompter.questions == ["Do you want to continue anyway?"]
    assert runner.commands == []


def test_interactive_run_asks_for_updates_and_confirmation():
    runner = FakeRunner()
    prompter = ScriptedPrompter(answers=[True, True])

    installer = build_installer(
        runner=runner, prompter=prompter, assume_yes=False, auto_update=None
    )

    assert installer.run() == 0
    assert prompter.questions == [
        "Enable automatic updates?",
        "Ready to install worker node. Do you want to continue?",
    ]
    assert "--unstable-update-download-path" in runner.commands[-1]


def test_cancelled_setup_exits_zero_without_starting_worker():
    runner = FakeRunner(responses={"run -it": 130})

    assert build_installer(runner=runner).run() == 0
    assert len(runner.commands) == 1


def test_failed_setup_exits_one():
    runner = FakeRunner(responses={"run -it": 1})

    assert build_installer(runner=runner).run() == 1
    assert len(runner.commands) == 1


def test_update_swaps_containers():
    runner = FakeRunner(responses={"inspect tashi-depin-worker-old": 1, "inspect tashi-depin-worker-new": 1})

    assert build_installer(runner=runner, subcommand="update").run() == 0
    assert runner.subcommands() == [
        "inspect",
        "inspect",
        "create",
        "stop",
        "start",
        "rename",
        "rename",
        "rm",
    ]
    assert "--volumes-from=tashi-depin-worker" in runner.commands[2]


def test_update_conflict_performs_no_mutation():
    runner = FakeRunner(responses={"inspect tashi-depin-worker-new": 1})

    assert build_installer(runner=runner, subcommand="update").run() == 1
    assert runner.subcommands() == ["inspect", "inspect"]


def test_elevation_prefix_reaches_engine_commands():
    runner = FakeRunner()
    installer = build_installer(runner=runner)
    installer.privilege_service = FakePrivilege(prefix=("sudo", "-g", "docker"))

    assert installer.run() == 0
    assert all(cmd[:4] == ["sudo", "-g", "docker", "docker"] for cmd in runner.commands)


def test_engine_selection_prefers_podman_only_when_docker_is_missing():
    podman_host = dataclasses.replace(GOOD_HOST, has_docker=False, has_podman=True)
    installer = build_installer(profile=podman_host)

    profile, elevation = installer.gather_profile()
    engine = installer.build_engine(profile, elevation)

    assert engine.binary == "podman"


def test_build_engine_without_runtime_suggests_installs():
    bare_host = dataclasses.replace(GOOD_HOST, has_docker=False)
    installer = build_installer(profile=bare_host)
    profile, elevation = installer.gather_profile()

    with pytest.raises(NoRuntimeFound) as exc_info:
        installer.build_engine(profile, elevation)

    assert exc_info.value.suggestions == (
        "sudo apt update && sudo apt install -y docker.io",
        "sudo apt update && sudo apt install -y podman",
    )
