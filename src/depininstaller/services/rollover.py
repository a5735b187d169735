"""Replaces a running worker container with an updated one.

The sequence is strictly linear::

    preflight name check -> create new -> stop old -> start new
        -> rename old -> rename new -> cleanup

Creating the replacement happens while the old container is still running,
but it is only started after the old one has stopped, so the shared auth
volume is never used by two running workers. Any failed step aborts the
rollover and leaves every container where it is for the operator to
inspect; nothing is rolled back or retried automatically.
"""

import dataclasses
import shlex
from typing import Callable, Dict

from rich.markup import escape

from depininstaller.errors import EngineError, RolloverConflict
from depininstaller.errors_catalog import actionable_error
from depininstaller.models import ContainerSpec, RolloverStage, RolloverState

_RECOVERY_HINTS: Dict[RolloverStage, str] = {
    RolloverStage.CREATE_NEW: (
        "The running worker was not touched. Remove '{new}' if it was partially created, "
        "then retry."
    ),
    RolloverStage.STOP_OLD: (
        "'{new}' was created but not started and is kept for inspection. "
        "Check '{old}', then delete '{new}' before retrying."
    ),
    RolloverStage.START_NEW: (
        "'{old}' is stopped and '{new}' failed to start. Inspect '{new}', then either "
        "start '{old}' again or fix and start '{new}'."
    ),
    RolloverStage.RENAME_OLD: (
        "'{old}' still has its original name. Stop '{new}' and start '{old}' to go back, "
        "or rename the containers manually."
    ),
    RolloverStage.RENAME_NEW: (
        "The previous worker is now '{backup}'. Rename '{new}' to '{old}' manually."
    ),
    RolloverStage.CLEANUP: "The update succeeded. Delete '{backup}' manually.",
}


class RolloverController:
    """Drives one update of the worker container through a single engine."""

    def __init__(self, engine, prompter, logger, console, assume_yes: bool = False):
        self.engine = engine
        self.prompter = prompter
        self.logger = logger
        self.console = console
        self.assume_yes = assume_yes

    @staticmethod
    def backup_name(name: str) -> str:
        return f"{name}-old"

    @staticmethod
    def replacement_name(name: str) -> str:
        return f"{name}-new"

    def preflight_name_check(self, name: str):
        """Refuses to start while containers from an earlier update exist.

        Only inspects; calling it repeatedly without engine changes gives
        the same answer.
        """
        leftovers = [
            candidate
            for candidate in (self.backup_name(name), self.replacement_name(name))
            if self.engine.inspect(candidate)
        ]
        if leftovers:
            raise RolloverConflict(
                actionable_error("rollover_conflict", names=", ".join(leftovers)),
                names=leftovers,
            )

    def run(self, name: str, spec: ContainerSpec) -> RolloverState:
        state = RolloverState(old_handle=name)
        backup = self.backup_name(name)
        replacement = dataclasses.replace(spec, name=self.replacement_name(name))

        try:
            self.preflight_name_check(name)
        except RolloverConflict:
            state.failed_stage = RolloverStage.PREFLIGHT_NAME_CHECK
            state.stage = RolloverStage.ABORTED
            raise

        state.new_handle = self._advance(
            state, RolloverStage.CREATE_NEW, self.engine.create, replacement, clone_from=name
        )
        self._advance(state, RolloverStage.STOP_OLD, self.engine.stop, name)
        self._advance(state, RolloverStage.START_NEW, self.engine.start, state.new_handle)
        self._advance(state, RolloverStage.RENAME_OLD, self.engine.rename, name, backup)
        self._advance(state, RolloverStage.RENAME_NEW, self.engine.rename, state.new_handle, name)

        if self._should_delete_backup(backup):
            self._advance(state, RolloverStage.CLEANUP, self.engine.remove, backup)
        else:
            state.kept_old = True
            remove_cmd = self.engine.command("rm", backup)
            self.console.print(
                f"[yellow]Keeping '{escape(backup)}'.[/yellow] It still uses disk space; remove it with "
                f"'{escape(shlex.join(remove_cmd))}' once the update is confirmed."
            )
            self.logger.info("Previous worker kept as %s", backup)

        state.old_handle = backup
        state.new_handle = name
        state.stage = RolloverStage.COMPLETED
        return state

    def _should_delete_backup(self, backup: str) -> bool:
        if self.assume_yes or not self.prompter.is_interactive():
            return True
        return self.prompter.confirm(f"Would you like to delete {backup}?", default=True)

    def _advance(self, state: RolloverState, stage: RolloverStage, callback: Callable, *args, **kwargs):
        state.stage = stage
        self.logger.debug("Rollover stage: %s", stage.value)

        try:
            return callback(*args, **kwargs)
        except EngineError:
            state.failed_stage = stage
            state.stage = RolloverStage.ABORTED
            recovery = _RECOVERY_HINTS[stage].format(
                old=state.old_handle,
                new=self.replacement_name(state.old_handle),
                backup=self.backup_name(state.old_handle),
            )
            message = actionable_error("update_failed", stage=stage.value, recovery=recovery)
            self.console.print(f"[bold red]Update aborted:[/bold red] {escape(message)}")
            self.logger.error(message)
            raise
