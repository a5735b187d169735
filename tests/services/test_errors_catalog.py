import pytest

from depininstaller.constants import TROUBLESHOOT_LINK
from depininstaller.errors_catalog import actionable_error


def test_actionable_error_formats_message_with_suggested_action():
    message = actionable_error("rollover_conflict", names="worker-old")

    assert "worker-old already exists" in message
    assert "Suggested action:" in message


def test_setup_failure_points_to_troubleshooting():
    assert TROUBLESHOOT_LINK in actionable_error("setup_failed", returncode="1")


def test_unknown_catalog_key_raises():
    with pytest.raises(KeyError):
        actionable_error("does_not_exist")
