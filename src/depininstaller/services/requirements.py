"""Host requirement gate.

``evaluate`` is a pure function of a ``HostProfile``: it reads nothing from
the host and returns a ``Verdict`` whose results are always in display
order (platform, CPU, memory, disk, container runtime, privilege,
connectivity). ``confirm_verdict`` applies the proceed/refuse/prompt policy
on top of it.
"""

from typing import List, Optional, Tuple

from depininstaller.constants import SUPPORTED_ARCHITECTURES
from depininstaller.errors import PromptUnavailable, RequirementsNotMet
from depininstaller.errors_catalog import actionable_error
from depininstaller.models import CheckResult, HostProfile, OsKind, Severity, Thresholds, Verdict
from depininstaller.services.privilege import DOCKER_ELEVATION, PODMAN_ELEVATION, ROOTLESS_LINKS

_INSTALL_TEMPLATES = {
    OsKind.DEBIAN: "sudo apt update && sudo apt install -y {package}",
    OsKind.FEDORA: "sudo dnf install -y {package}",
    OsKind.ARCH: "sudo pacman -S --noconfirm {package}",
    OsKind.OPENSUSE: "sudo zypper install -y {package}",
    OsKind.MACOS: "brew install {package}",
}


def suggest_install(package: str, os_kind: OsKind) -> str:
    template = _INSTALL_TEMPLATES.get(os_kind)
    if template is None:
        return f"Please install '{package}' manually for your OS."
    return template.format(package=package)


def check_platform(profile: HostProfile) -> CheckResult:
    if profile.arch in SUPPORTED_ARCHITECTURES:
        return CheckResult("Platform Check", Severity.OK, f"supported platform {profile.arch}")

    if profile.os_kind is OsKind.MACOS and profile.arch == "arm64":
        return CheckResult(
            "Platform Check",
            Severity.WARNING,
            f"unsupported platform {profile.arch}",
            hints=(
                "MacOS Apple Silicon is not currently supported, but the worker can still run "
                "through the Rosetta compatibility layer.",
                "Performance and earnings will be less than a native node.",
                "You may be prompted to install Rosetta when the worker node starts.",
            ),
        )

    return CheckResult(
        "Platform Check",
        Severity.ERROR,
        f"unsupported platform {profile.arch}",
        hints=("Join the Tashi Discord to request support for your system.",),
    )


def check_cpu(profile: HostProfile, thresholds: Thresholds) -> CheckResult:
    threads = profile.cpu_threads
    if threads >= thresholds.recommended_cpu_threads:
        return CheckResult(
            "CPU Check",
            Severity.OK,
            f"Found {threads} threads (>= {thresholds.recommended_cpu_threads} recommended)",
        )
    if threads >= thresholds.min_cpu_threads:
        return CheckResult(
            "CPU Check",
            Severity.WARNING,
            f"Found {threads} threads (>= {thresholds.min_cpu_threads} required, "
            f"{thresholds.recommended_cpu_threads} recommended)",
        )
    return CheckResult(
        "CPU Check",
        Severity.ERROR,
        f"Only {threads} threads found (Minimum: {thresholds.min_cpu_threads} required)",
    )


def check_memory(profile: HostProfile, thresholds: Thresholds) -> CheckResult:
    mem_gb = profile.mem_gb
    if mem_gb >= thresholds.recommended_mem_gb:
        return CheckResult(
            "Memory Check",
            Severity.OK,
            f"Found {mem_gb}GB RAM (>= {thresholds.recommended_mem_gb}GB recommended)",
        )
    if mem_gb >= thresholds.min_mem_gb:
        return CheckResult(
            "Memory Check",
            Severity.WARNING,
            f"Found {mem_gb}GB RAM (>= {thresholds.min_mem_gb}GB required, "
            f"{thresholds.recommended_mem_gb}GB recommended)",
        )
    return CheckResult(
        "Memory Check",
        Severity.ERROR,
        f"Only {mem_gb}GB RAM found (Minimum: {thresholds.min_mem_gb}GB required)",
    )


def check_disk(profile: HostProfile, thresholds: Thresholds) -> CheckResult:
    free_gb = profile.disk_free_gb
    if free_gb >= thresholds.min_disk_gb:
        return CheckResult(
            "Disk Space Check",
            Severity.OK,
            f"Found {free_gb}GB free (>= {thresholds.min_disk_gb}GB required)",
        )
    return CheckResult(
        "Disk Space Check",
        Severity.ERROR,
        f"Only {free_gb}GB free space (Minimum: {thresholds.min_disk_gb}GB required)",
    )


def check_container_runtime(profile: HostProfile) -> CheckResult:
    if profile.has_docker:
        return CheckResult("Container Runtime Check", Severity.OK, "Docker is installed")
    if profile.has_podman:
        return CheckResult("Container Runtime Check", Severity.OK, "Podman is installed")
    return CheckResult(
        "Container Runtime Check",
        Severity.ERROR,
        "Neither Docker nor Podman is installed.",
        hints=(
            suggest_install("docker.io", profile.os_kind),
            suggest_install("podman", profile.os_kind),
        ),
    )


def check_privilege(profile: HostProfile) -> Optional[CheckResult]:
    engine = profile.engine_name
    if engine is None:
        return None

    if profile.os_kind is OsKind.MACOS:
        return CheckResult("Privilege Check", Severity.OK, "Root privileges are not needed on MacOS")

    if not profile.needs_elevation:
        return CheckResult(
            "Privilege Check",
            Severity.OK,
            f"User can run {engine} containers without superuser privileges.",
        )

    elevation = " ".join(DOCKER_ELEVATION if engine == "docker" else PODMAN_ELEVATION)
    return CheckResult(
        "Privilege Check",
        Severity.WARNING,
        f"User cannot run {engine} containers without superuser privileges.",
        hints=(
            f"'{engine} run' command will be executed using '{elevation}'.",
            "You may be prompted for your password during setup.",
            "Rootless configuration is recommended to avoid this requirement.",
            f"For more information, see {ROOTLESS_LINKS[engine]}",
        ),
    )


def check_connectivity(profile: HostProfile) -> CheckResult:
    if profile.internet_reachable:
        return CheckResult(
            "Internet Connectivity", Severity.OK, "Device has public Internet access."
        )
    return CheckResult("Internet Connectivity", Severity.ERROR, "No internet access detected!")


def evaluate(profile: HostProfile, thresholds: Thresholds = Thresholds()) -> Verdict:
    results: List[CheckResult] = [
        check_platform(profile),
        check_cpu(profile, thresholds),
        check_memory(profile, thresholds),
        check_disk(profile, thresholds),
        check_container_runtime(profile),
    ]

    privilege = check_privilege(profile)
    if privilege is not None:
        results.append(privilege)

    results.append(check_connectivity(profile))
    return Verdict(results=tuple(results))


def evaluate_nat(profile: HostProfile, agent_port: int) -> CheckResult:
    """Classifies reachability from the Internet. Informational only."""
    hints: Tuple[str, ...] = (
        "If this device is not accessible from the Internet, some DePIN services will be "
        "disabled; earnings may be less than a publicly accessible node.",
        f"For maximum earning potential, ensure UDP port {agent_port} is forwarded to this device.",
        "Consult your router's manual or contact your Internet Service Provider for details.",
    )

    if not profile.local_ip:
        return CheckResult("NAT Check", Severity.WARNING, "Could not determine local IP.", hints)
    if not profile.public_ip:
        return CheckResult("NAT Check", Severity.WARNING, "Could not determine public IP.", hints)
    if profile.local_ip == profile.public_ip:
        return CheckResult(
            "NAT Check",
            Severity.OK,
            f"Open NAT / Publicly accessible (Public IP: {profile.public_ip})",
        )
    return CheckResult(
        "NAT Check",
        Severity.WARNING,
        f"NAT detected (Local: {profile.local_ip}, Public: {profile.public_ip})",
        hints,
    )


def confirm_verdict(verdict: Verdict, ignore_warnings: bool, assume_yes: bool, prompter) -> bool:
    """Returns True to proceed, False when the operator declines.

    Raises ``RequirementsNotMet`` on any error and ``PromptUnavailable`` when
    warnings need a confirmation nobody can give.
    """
    if verdict.errors:
        raise RequirementsNotMet(actionable_error("requirements_not_met"), verdict=verdict)

    if not verdict.warnings:
        return True

    if ignore_warnings or assume_yes:
        return True

    if not prompter.is_interactive():
        raise PromptUnavailable(actionable_error("prompt_unavailable", flag="--ignore-warnings"))

    return prompter.confirm("Do you want to continue anyway?", default=False)
