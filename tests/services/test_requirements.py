import pytest

from depininstaller.errors import PromptUnavailable, RequirementsNotMet
from depininstaller.models import HostProfile, OsKind, Severity
from depininstaller.services.requirements import (
    confirm_verdict,
    evaluate,
    evaluate_nat,
    suggest_install,
)


class ScriptedPrompter:
    def __init__(self, answer=True, interactive=True):
        self.answer = answer
        self.interactive = interactive
        self.asked = 0

    def is_interactive(self):
        return self.interactive

    def confirm(self, question, default):
        self.asked += 1
        return self.answer


def _names(results):
    return [result.name for result in results]


def test_recommended_host_has_no_errors_or_warnings():
    profile = HostProfile(cpu_threads=8, mem_gb=16, disk_free_gb=100, has_docker=True)

    verdict = evaluate(profile)

    assert verdict.errors == ()
    assert verdict.warnings == ()
    assert confirm_verdict(verdict, False, False, ScriptedPrompter(interactive=False)) is True


def test_minimum_host_warns_about_cpu_and_memory():
    profile = HostProfile(cpu_threads=2, mem_gb=2, disk_free_gb=25, has_docker=True)

    verdict = evaluate(profile)

    assert verdict.errors == ()
    assert _names(verdict.warnings) == ["CPU Check", "Memory Check"]


def test_small_disk_without_runtime_fails_without_prompt():
    profile = HostProfile(cpu_threads=8, mem_gb=16, disk_free_gb=5)
    prompter = ScriptedPrompter()

    verdict = evaluate(profile)

    assert _names(verdict.errors) == ["Disk Space Check", "Container Runtime Check"]
    with pytest.raises(RequirementsNotMet) as exc_info:
        confirm_verdict(verdict, ignore_warnings=True, assume_yes=True, prompter=prompter)
    assert exc_info.value.verdict is verdict
    assert prompter.asked == 0


@pytest.mark.parametrize(
    "field,value,check_name",
    [
        ("cpu_threads", 1, "CPU Check"),
        ("mem_gb", 1, "Memory Check"),
        ("disk_free_gb", 19, "Disk Space Check"),
        ("internet_reachable", False, "Internet Connectivity"),
        ("arch", "riscv64", "Platform Check"),
    ],
)
def test_any_field_below_minimum_is_an_error(field, value, check_name):
    values = {"cpu_threads": 8, "mem_gb": 16, "disk_free_gb": 100, "has_docker": True}
    values[field] = value

    verdict = evaluate(HostProfile(**values))

    assert _names(verdict.errors) == [check_name]


def test_results_follow_display_order():
    profile = HostProfile(cpu_threads=8, mem_gb=16, disk_free_gb=100, has_podman=True)

    verdict = evaluate(profile)

    assert _names(verdict.results) == [
        "Platform Check",
        "CPU Check",
        "Memory Check",
        "Disk Space Check",
        "Container Runtime Check",
        "Privilege Check",
        "Internet Connectivity",
    ]


def test_apple_silicon_runs_through_emulation_with_warning():
    profile = HostProfile(
        cpu_threads=8,
        mem_gb=16,
        disk_free_gb=100,
        has_docker=True,
        os_kind=OsKind.MACOS,
        arch="arm64",
    )

    verdict = evaluate(profile)

    assert _names(verdict.warnings) == ["Platform Check"]
    assert "Rosetta" in verdict.warnings[0].hints[0]


def test_elevation_requirement_is_a_warning():
    profile = HostProfile(
        cpu_threads=8, mem_gb=16, disk_free_gb=100, has_docker=True, needs_elevation=True
    )

    verdict = evaluate(profile)

    assert _names(verdict.warnings) == ["Privilege Check"]
    assert "sudo -g docker" in verdict.warnings[0].hints[0]


def test_missing_runtime_suggests_packages_for_os():
    profile = HostProfile(cpu_threads=8, mem_gb=16, disk_free_gb=100, os_kind=OsKind.FEDORA)

    runtime = evaluate(profile).errors[0]

    assert runtime.hints == (
        "sudo dnf install -y docker.io",
        "sudo dnf install -y podman",
    )


def test_suggest_install_falls_back_to_manual_instructions():
    assert suggest_install("podman", OsKind.UNKNOWN) == (
        "Please install 'podman' manually for your OS."
    )
    assert suggest_install("podman", OsKind.MACOS) == "brew install podman"


def test_warnings_without_terminal_or_force_flag_are_fatal():
    profile = HostProfile(cpu_threads=2, mem_gb=16, disk_free_gb=100, has_docker=True)

    with pytest.raises(PromptUnavailable, match="--ignore-warnings"):
        confirm_verdict(evaluate(profile), False, False, ScriptedPrompter(interactive=False))


@pytest.mark.parametrize("ignore_warnings,assume_yes", [(True, False), (False, True)])
def test_force_flags_skip_warning_prompt(ignore_warnings, assume_yes):
    profile = HostProfile(cpu_threads=2, mem_gb=16, disk_free_gb=100, has_docker=True)
    prompter = ScriptedPrompter(interactive=False)

    assert confirm_verdict(evaluate(profile), ignore_warnings, assume_yes, prompter) is True
    assert prompter.asked == 0


@pytest.mark.parametrize("answer", [True, False])
def test_interactive_warning_prompt_returns_operator_choice(answer):
    profile = HostProfile(cpu_threads=2, mem_gb=16, disk_free_gb=100, has_docker=True)
    prompter = ScriptedPrompter(answer=answer)

    assert confirm_verdict(evaluate(profile), False, False, prompter) is answer
    assert prompter.asked == 1


@pytest.mark.parametrize(
    "local_ip,public_ip,severity",
    [
        (None, "203.0.113.7", Severity.WARNING),
        ("192.168.1.4", None, Severity.WARNING),
        ("192.168.1.4", "203.0.113.7", Severity.WARNING),
        ("203.0.113.7", "203.0.113.7", Severity.OK),
    ],
)
def test_nat_classification(local_ip, public_ip, severity):
    profile = HostProfile(
        cpu_threads=8, mem_gb=16, disk_free_gb=100, local_ip=local_ip, public_ip=public_ip
    )

    result = evaluate_nat(profile, agent_port=39065)

    assert result.severity is severity
    if severity is Severity.WARNING:
        assert any("39065" in hint for hint in result.hints)
