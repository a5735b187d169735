"""Domain errors for depininstaller."""


class InstallerError(RuntimeError):
    """Raised when the installation cannot continue safely."""


class RequirementsNotMet(InstallerError):
    """Raised when the host fails at least one hard requirement."""

    def __init__(self, message: str, verdict=None):
        super().__init__(message)
        self.verdict = verdict


class PromptUnavailable(InstallerError):
    """Raised when a confirmation is required but no terminal can answer it."""


class NoRuntimeFound(InstallerError):
    """Raised when neither Docker nor Podman is installed."""

    def __init__(self, message: str, suggestions=()):
        super().__init__(message)
        self.suggestions = tuple(suggestions)


class EngineError(InstallerError):
    """Raised when a container engine command exits with a non-zero status."""

    def __init__(self, op: str, returncode: int, stderr: str = ""):
        self.op = op
        self.returncode = returncode
        self.stderr = stderr
        message = f"Container engine operation '{op}' failed ({returncode})"
        if stderr:
            message = f"{message}\n{stderr}"
        super().__init__(message)


class RolloverConflict(InstallerError):
    """Raised when containers left behind by a previous update are still present."""

    def __init__(self, message: str, names=()):
        super().__init__(message)
        self.names = tuple(names)


class SetupCancelled(Exception):
    """The operator interrupted the interactive worker setup.

    This is not a failure. The worker signals it only through its exit
    status, see ``constants.SETUP_CANCELLED_EXIT_CODE``.
    """
