"""First-run installation: interactive setup, then the detached worker."""

from depininstaller.constants import SETUP_CANCELLED_EXIT_CODE
from depininstaller.errors import EngineError, SetupCancelled
from depininstaller.errors_catalog import actionable_error
from depininstaller.models import ContainerSpec


class InstallService:
    """Provisions credentials in the auth volume and starts the worker."""

    def __init__(self, engine, logger, console):
        self.engine = engine
        self.logger = logger
        self.console = console

    def run_setup(self, spec: ContainerSpec):
        self.console.print("Starting worker in interactive setup mode.\n")
        self.logger.info("Running interactive setup with image %s", spec.image)

        exit_code = self.engine.run_foreground(spec)
        self.console.print("")

        if exit_code == SETUP_CANCELLED_EXIT_CODE:
            raise SetupCancelled("Worker setup cancelled. You may re-run the installer at any time.")

        if exit_code != 0:
            raise EngineError(
                "run",
                exit_code,
                actionable_error("setup_failed", returncode=str(exit_code)),
            )

    def start_worker(self, spec: ContainerSpec) -> str:
        try:
            handle = self.engine.run_detached(spec)
        except EngineError as exc:
            self.console.print(
                "[red]✗[/red] "
                + actionable_error("worker_start_failed", returncode=str(exc.returncode))
            )
            raise
        self.logger.info("Worker container started: %s", handle)
        return handle

    def install(self, setup_spec: ContainerSpec, run_spec: ContainerSpec) -> str:
        self.run_setup(setup_spec)
        return self.start_worker(run_spec)
