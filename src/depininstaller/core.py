import logging
import shlex
import shutil
import subprocess
from typing import Optional, Tuple

import requests
from rich.console import Console
from rich.markup import escape

from .constants import MANUAL_UPDATE_LINK, TROUBLESHOOT_LINK
from .errors import InstallerError, PromptUnavailable, SetupCancelled
from .errors_catalog import actionable_error
from .models import HostProfile, InstallOptions, RolloverState, Thresholds
from .services.command_runner import CommandRunner
from .services.container_runtime import ContainerEngine, detect_engine_class, find_engine_class
from .services.host_probe import HostProbeService
from .services.install import InstallService
from .services.privilege import PrivilegeService
from .services.prompt import TtyPrompter
from .services.report import ReportService
from .services.requirements import confirm_verdict, evaluate, evaluate_nat
from .services.rollover import RolloverController
from .services.worker_spec import WorkerSpecService

console = Console(stderr=True)
logger = logging.getLogger("depininstaller")


class WorkerInstaller:
    SUBCOMMANDS = ("install", "update")

    def __init__(
        self,
        options: InstallOptions,
        prompter=None,
        runner: Optional[CommandRunner] = None,
        probe: Optional[HostProbeService] = None,
        privilege_service: Optional[PrivilegeService] = None,
        thresholds: Thresholds = Thresholds(),
    ):
        if options.subcommand not in self.SUBCOMMANDS:
            raise InstallerError(
                f"Unknown subcommand '{options.subcommand}'. Use one of: {', '.join(self.SUBCOMMANDS)}"
            )

        self.options = options
        self.thresholds = thresholds
        self.prompter = prompter or TtyPrompter(console)
        self.command_runner = runner or CommandRunner(logger=logger, subprocess_module=subprocess)
        self.probe = probe or HostProbeService(
            runner=self.command_runner,
            logger=logger,
            requests_module=requests,
            which=shutil.which,
        )
        self.privilege_service = privilege_service or PrivilegeService(logger=logger)
        self.report_service = ReportService(console=console, logger=logger)

    def gather_profile(self) -> Tuple[HostProfile, Tuple[str, ...]]:
        """Reads host facts once and resolves the engine elevation prefix."""
        os_kind = self.probe.detect_os()
        engine_cls = find_engine_class(self.probe.has_command)
        engine_name = engine_cls.binary if engine_cls else None

        elevation = self.privilege_service.elevation_prefix(engine_name, os_kind)
        profile = self.probe.build_profile(os_kind=os_kind, needs_elevation=bool(elevation))
        logger.debug("Host profile: %s", profile)
        return profile, elevation

    def check_requirements(self, profile: HostProfile) -> bool:
        verdict = evaluate(profile, self.thresholds)
        self.report_service.render_verdict(verdict)

        if verdict.warnings and self.options.ignore_warnings and not verdict.errors:
            console.print("'--ignore-warnings' was passed. Continuing with installation.")

        return confirm_verdict(
            verdict,
            ignore_warnings=self.options.ignore_warnings,
            assume_yes=self.options.assume_yes,
            prompter=self.prompter,
        )

    def check_nat(self, profile: HostProfile):
        self.report_service.render_result(evaluate_nat(profile, self.options.agent_port))

    def resolve_auto_update(self) -> bool:
        if self.options.auto_update is not None:
            enabled = self.options.auto_update
        else:
            console.print(
                "Your DePIN worker will require periodic updates to ensure that it keeps up with "
                "new features and bug fixes.\n"
                "Out-of-date workers may be excluded from the DePIN network and be unable to "
                "complete jobs or earn rewards.\n\n"
                "We recommend enabling automatic updates, which take place entirely in the "
                "container and do not make any changes to your system.\n\n"
                "Otherwise, you will need to check the worker logs regularly to see when a new "
                "update is available, and apply the update manually.\n",
                highlight=False,
            )
            enabled = self.prompter.is_interactive() and self.prompter.confirm(
                "Enable automatic updates?", default=True
            )

        if enabled:
            console.print("Automatic updates enabled.")
        else:
            console.print(
                "Automatic updates [bold]disabled[/bold]. For manual upgrade instructions, see:\n"
                f"{MANUAL_UPDATE_LINK}"
            )
        return enabled

    def confirm_continue(self) -> bool:
        if self.options.assume_yes:
            return True
        if not self.prompter.is_interactive():
            raise PromptUnavailable(actionable_error("prompt_unavailable", flag="--yes"))
        return self.prompter.confirm(
            f"Ready to {self.options.subcommand} worker node. Do you want to continue?",
            default=True,
        )

    def build_engine(self, profile: HostProfile, elevation: Tuple[str, ...]) -> ContainerEngine:
        engine_cls = detect_engine_class(self.probe.has_command, profile.os_kind)
        return engine_cls(
            runner=self.command_runner,
            logger=logger,
            console=console,
            elevation=elevation,
        )

    def install(self, engine: ContainerEngine, spec_service: WorkerSpecService, auto_update: bool) -> str:
        console.print("Installing worker. The commands being run will be printed for transparency.\n")
        install_service = InstallService(engine=engine, logger=logger, console=console)
        return install_service.install(
            setup_spec=spec_service.setup_spec(),
            run_spec=spec_service.run_spec(auto_update=auto_update),
        )

    def update(
        self,
        engine: ContainerEngine,
        spec_service: WorkerSpecService,
        auto_update: bool,
    ) -> RolloverState:
        console.print("Updating worker. The commands being run will be printed for transparency.\n")
        controller = RolloverController(
            engine=engine,
            prompter=self.prompter,
            logger=logger,
            console=console,
            assume_yes=self.options.assume_yes,
        )
        return controller.run(
            self.options.container_name,
            spec_service.run_spec(auto_update=auto_update),
        )

    def post_install(self, engine: ContainerEngine):
        name = self.options.container_name
        console.print("")
        console.print("Worker is running: [green]✓[/green]")
        console.print("")
        console.print(
            f"To check the status of your worker: '{shlex.join(engine.status_command())}' (name: {name})",
            highlight=False,
        )
        console.print(
            f"To view the logs of your worker: '{shlex.join(engine.logs_command(name))}'",
            highlight=False,
        )

    def run(self) -> int:
        try:
            self.report_service.display_logo()
            console.print("Starting system checks...\n")
            logger.info("Starting depininstaller (%s)...", self.options.subcommand)

            profile, elevation = self.gather_profile()

            if not self.check_requirements(profile):
                logger.info("Operator declined to continue after requirement warnings.")
                return 0

            self.report_service.rule()
            self.check_nat(profile)
            self.report_service.rule()
            auto_update = self.resolve_auto_update()
            self.report_service.rule()

            if not self.confirm_continue():
                logger.info("Operator declined to %s the worker.", self.options.subcommand)
                return 0
            console.print("")

            engine = self.build_engine(profile, elevation)
            spec_service = WorkerSpecService(self.options, profile)

            if self.options.subcommand == "update":
                self.update(engine, spec_service, auto_update)
            else:
                self.install(engine, spec_service, auto_update)

            self.post_install(engine)
            return 0

        except SetupCancelled as exc:
            console.print(escape(str(exc)))
            logger.info("Interactive setup cancelled by operator")
            return 0
        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            return 1
        except InstallerError as exc:
            console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", highlight=False)
            console.print(f"[red]✗[/red] Troubleshooting instructions: {TROUBLESHOOT_LINK}")
            logger.error(str(exc))
            return 1
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {escape(str(exc))}")
            console.print(f"[red]✗[/red] Troubleshooting instructions: {TROUBLESHOOT_LINK}")
            logger.exception("Unexpected error")
            return 1
