"""
Secret guards — scoped lifetime for the access token and vault passphrase.

Security invariants:
- The access token lives only in an ``AccessToken``; ``repr``/``str``
  never show it, and once ``clear()`` ran ``reveal()`` raises.
- The vault passphrase is written to disk only through ``VaultPassFile``,
  with mode 0600, and the file is removed when the guard exits, whatever
  the exit path (normal return, SystemExit, KeyboardInterrupt).

Usage::

    with VaultPassFile(path, passphrase) as vault_file, token:
        ...   # vault_file.path exists, token.reveal() works
    # file removed, token cleared
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)

_MASK = "***"


class SecretClearedError(RuntimeError):
    """Raised when a secret is read after it has been erased."""


class AccessToken:
    """In-memory holder for the source-control access token."""

    def __init__(self, value: str) -> None:
        self._value: str | None = value

    @property
    def cleared(self) -> bool:
        return self._value is None

    def reveal(self) -> str:
        """Return the raw token. Raises once the token has been cleared."""
        if self._value is None:
            raise SecretClearedError("access token already cleared")
        return self._value

    def redact(self, text: str) -> str:
        """Replace every occurrence of the token in ``text``."""
        if self._value:
            return text.replace(self._value, _MASK)
        return text

    def clear(self) -> None:
        """Drop the token reference. Idempotent."""
        if self._value is not None:
            logger.debug("Access token cleared")
        self._value = None

    def __enter__(self) -> AccessToken:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.clear()

    def __repr__(self) -> str:
        state = "cleared" if self.cleared else _MASK
        return f"<AccessToken {state}>"

    __str__ = __repr__


class VaultPassFile:
    """Owner-only passphrase file, removed when the guard exits."""

    MODE = 0o600

    def __init__(self, path: Path, passphrase: str) -> None:
        self.path = path
        self._passphrase: str | None = passphrase
        self._written = False

    @property
    def exists(self) -> bool:
        return self.path.exists()

    def write(self) -> Path:
        """Create the file fresh at mode 0600 and write the passphrase."""
        if self._passphrase is None:
            raise SecretClearedError("vault passphrase already erased")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Replace whatever sits at the path (stale file or symlink) instead
        # of writing through it; the link target is never touched.
        self.path.unlink(missing_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL | os.O_NOFOLLOW, self.MODE)
        try:
            # umask may have narrowed the creation mode
            os.fchmod(fd, self.MODE)
            os.write(fd, (self._passphrase + "\n").encode("utf-8"))
        finally:
            os.close(fd)

        self._written = True
        # The file is now the only copy this process keeps
        self._passphrase = None
        logger.debug("Vault passphrase written to %s (mode %o)", self.path, self.MODE)
        return self.path

    def remove(self) -> None:
        """Delete the file if present and forget the passphrase. Idempotent."""
        self._passphrase = None
        try:
            self.path.unlink()
            logger.debug("Vault passphrase file removed: %s", self.path)
        except FileNotFoundError:
            pass

    def __enter__(self) -> VaultPassFile:
        try:
            self.write()
        except BaseException:
            self.remove()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.remove()

    def __repr__(self) -> str:
        return f"<VaultPassFile path={str(self.path)!r} written={self._written}>"
