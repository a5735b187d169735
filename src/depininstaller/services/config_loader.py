"""Configuration loader for depininstaller."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from depininstaller.errors import InstallerError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    BOOLEAN_KEYS = {"auto_update", "ignore_warnings", "yes", "verbose", "log_expanded"}
    STRING_KEYS = {"image_tag", "log_file", "container_name", "auth_volume"}

    @property
    def supported_keys(self):
        return self.BOOLEAN_KEYS | self.STRING_KEYS

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise InstallerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise InstallerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise InstallerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.supported_keys)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise InstallerError(f"Unknown configuration keys: {unknown_list}")

        for key, value in parsed.items():
            if key in self.BOOLEAN_KEYS and not isinstance(value, bool):
                raise InstallerError(f"Configuration key '{key}' must be true or false.")
            if key in self.STRING_KEYS and (not isinstance(value, str) or not value.strip()):
                raise InstallerError(f"Configuration key '{key}' must be a non-empty string.")

        return parsed
