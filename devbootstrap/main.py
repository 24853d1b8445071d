"""
devbootstrap — CLI entrypoint.

Usage:
    devbootstrap            run the full bootstrap
    devbootstrap --help     show usage
    python -m devbootstrap
"""

from __future__ import annotations

import json
import signal
import sys
from pathlib import Path

import click

from devbootstrap import __version__
from devbootstrap.core.observability.logging_config import setup_logging_from_env

_EPILOG = """\b
PAT REQUIREMENTS:
  A GitHub Personal Access Token with 'Contents: Read/Write' permission
  on the dotfiles repository. Generate one at:
  https://github.com/settings/personal-access-tokens

\b
  For fine-grained tokens:
    1. Select "Fine-grained personal access tokens"
    2. Choose resource access for the dotfiles repository
    3. Grant "Contents" permission with "Read and write" access

\b
WHAT IT DOES:
  - Checks for apt, a non-root user and sudo
  - Prompts for the PAT and the ansible vault passphrase
  - Installs ansible user-locally (pipx) plus galaxy collections
  - Creates ~/repo/, backs up an existing clone if you agree
  - Clones the dotfiles repository using your PAT
  - Runs the repository's ansible entry point
  - Removes the vault passphrase file on exit
"""


def _raise_on_signal(signum: int, frame: object) -> None:
    raise SystemExit(128 + signum)


def _ask_secret(label: str) -> str:
    return click.prompt(label, hide_input=True, default="", show_default=False)


def _confirm(question: str) -> bool:
    return click.confirm(question, default=False)


@click.command(
    epilog=_EPILOG,
    context_settings={
        "help_option_names": ["-h", "--help"],
        "ignore_unknown_options": True,
        "allow_extra_args": True,
    },
)
@click.version_option(version=__version__, prog_name="devbootstrap")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to bootstrap.yml (default: $DEVBOOT_CONFIG or ~/.config/devbootstrap/bootstrap.yml).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print a JSON run summary at the end.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    debug: bool,
    quiet: bool,
    config_path: str | None,
    as_json: bool,
) -> None:
    """Bootstrap a development workstation.

    Installs ansible, clones the private dotfiles repository with your
    GitHub PAT and runs its ansible entry point.
    """
    # ── Logging setup (once, at process start) ──────────────────
    setup_logging_from_env(verbose=verbose, debug=debug)

    from devbootstrap.core.config.loader import ConfigError, load_settings
    from devbootstrap.core.observability.console import Console
    from devbootstrap.core.use_cases.bootstrap import run_bootstrap

    console = Console(quiet=quiet)

    try:
        settings = load_settings(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.error(str(e))
        sys.exit(1)

    previous = signal.signal(signal.SIGTERM, _raise_on_signal)
    try:
        result = run_bootstrap(
            settings,
            ask_secret=_ask_secret,
            confirm=_confirm,
            console=console,
        )
    except (KeyboardInterrupt, click.Abort):
        click.echo(err=True)
        console.error("Interrupted")
        sys.exit(130)
    finally:
        signal.signal(signal.SIGTERM, previous)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))

    sys.exit(result.exit_code)
