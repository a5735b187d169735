import logging
import os

import click
from rich.logging import RichHandler

from .constants import AUTH_VOLUME, CONTAINER_NAME, DEFAULT_CONFIG_FILE, DEFAULT_IMAGE_TAG
from .core import InstallerError, WorkerInstaller
from .models import InstallOptions
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


def _configure_logging(verbose: bool, log_expanded: bool, log_file):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%Y-%m-%d %H:%M:%S]",
        handlers=[
            RichHandler(
                rich_tracebacks=True,
                show_time=log_expanded,
                show_level=log_expanded,
                show_path=False,
            )
        ],
        force=True,
    )

    logger = logging.getLogger("depininstaller")
    logger.setLevel(level)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)


@click.command()
@click.option(
    "--ignore-warnings",
    is_flag=True,
    default=None,
    help="Continue without confirmation when the host only meets minimum requirements.",
)
@click.option("-y", "--yes", is_flag=True, default=None, help="Answer yes to every confirmation.")
@click.option(
    "--auto-update",
    is_flag=True,
    default=None,
    help="Enable automatic in-container worker updates without asking.",
)
@click.option("--image-tag", required=False, help="Worker image reference to install or update to.")
@click.option(
    "--install",
    "subcommand",
    flag_value="install",
    default=None,
    help="Install the worker (default).",
)
@click.option("--update", "subcommand", flag_value="update", help="Update an installed worker.")
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--log-expanded",
    is_flag=True,
    default=None,
    envvar="LOG_EXPANDED",
    help="Show level and timestamp on log lines.",
)
def main(
    ignore_warnings,
    yes,
    auto_update,
    image_tag,
    subcommand,
    config,
    verbose,
    log_file,
    log_expanded,
):
    """Check this host and install or update the DePIN worker container."""
    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except InstallerError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_expanded = bool(_resolve_option(log_expanded, config_values, "log_expanded", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    _configure_logging(verbose, log_expanded, log_file)

    options = InstallOptions(
        image_tag=_resolve_option(image_tag, config_values, "image_tag", default=DEFAULT_IMAGE_TAG),
        subcommand=subcommand or "install",
        auto_update=_resolve_option(auto_update, config_values, "auto_update"),
        ignore_warnings=bool(
            _resolve_option(ignore_warnings, config_values, "ignore_warnings", default=False)
        ),
        assume_yes=bool(_resolve_option(yes, config_values, "yes", default=False)),
        container_name=_resolve_option(None, config_values, "container_name", default=CONTAINER_NAME),
        auth_volume=_resolve_option(None, config_values, "auth_volume", default=AUTH_VOLUME),
    )

    try:
        installer = WorkerInstaller(options=options)
    except InstallerError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(installer.run())


if __name__ == "__main__":
    main()
