"""
Credential collection — access token and vault passphrase.

Prompts with echo suppressed; both values must be non-empty. The token
goes into an :class:`AccessToken` and the passphrase into a
:class:`VaultPassFile` guard; the driver enters both guards so the file
exists for the rest of the run and is removed on every exit path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from devbootstrap.core.models.result import StageResult
from devbootstrap.core.models.settings import BootstrapSettings
from devbootstrap.core.observability.console import Console
from devbootstrap.core.security.secrets import AccessToken, VaultPassFile

logger = logging.getLogger(__name__)

PAT_SETTINGS_URL = "https://github.com/settings/personal-access-tokens"

SecretPrompt = Callable[[str], str]


@dataclass
class Credentials:
    """Secrets collected for one run. Enter both guards before use."""

    token: AccessToken
    vault_file: VaultPassFile


def print_token_guidance(settings: BootstrapSettings, console: Console) -> None:
    console.info(f"GitHub Personal Access Token required to clone {settings.repo_name} repository")
    console.echo(f"Generate one at: {PAT_SETTINGS_URL}")
    console.echo("Required permissions: Contents: Read/Write (for repository access)")
    console.echo(f"For fine-grained tokens: Select '{settings.repo_slug}' repository access")


def collect_credentials(
    settings: BootstrapSettings,
    ask_secret: SecretPrompt,
    console: Console,
) -> tuple[StageResult, Credentials | None]:
    """Prompt for the token and passphrase.

    Returns:
        ``(result, credentials)``; ``credentials`` is None when the
        result failed.
    """
    print_token_guidance(settings, console)
    token = ask_secret("Enter your GitHub PAT").strip()
    if not token:
        return StageResult.failure("credentials", "PAT cannot be empty"), None

    console.info("Vault passphrase required to decrypt the encrypted ansible secrets")
    passphrase = ask_secret("Enter your vault passphrase")
    if not passphrase:
        return StageResult.failure("credentials", "Vault passphrase cannot be empty"), None

    credentials = Credentials(
        token=AccessToken(token),
        vault_file=VaultPassFile(settings.vault_pass_path, passphrase),
    )
    logger.debug("Collected credentials (%r, %r)", credentials.token, credentials.vault_file)
    return (
        StageResult.success(
            "credentials",
            metadata={"vault_pass_file": str(settings.vault_pass_path)},
        ),
        credentials,
    )
