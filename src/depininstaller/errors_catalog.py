"""Actionable error catalog for depininstaller."""

from typing import Dict

from depininstaller.constants import TROUBLESHOOT_LINK

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "requirements_not_met": {
        "what": "System does not meet minimum requirements.",
        "next": "Resolve the failed checks above, then re-run the installer.",
    },
    "prompt_unavailable": {
        "what": "Cannot prompt to continue: no terminal is attached.",
        "next": "Re-run this with `{flag}` to continue installation.",
    },
    "no_runtime": {
        "what": "Neither Docker nor Podman is installed.",
        "next": "Install one of them, then re-run the installer.",
    },
    "rollover_conflict": {
        "what": "{names} already exists (presumably from a failed update).",
        "next": "Inspect and delete the leftover container(s) before retrying.",
    },
    "setup_failed": {
        "what": "Worker setup failed ({returncode}).",
        "next": "Please see the troubleshooting instructions at " + TROUBLESHOOT_LINK,
    },
    "worker_start_failed": {
        "what": "Worker failed to start ({returncode}).",
        "next": "Please see the troubleshooting instructions at " + TROUBLESHOOT_LINK,
    },
    "update_failed": {
        "what": "Worker failed to update during stage '{stage}'.",
        "next": "{recovery} See " + TROUBLESHOOT_LINK,
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
