"""
Tests for credential collection.
"""

from __future__ import annotations

from devbootstrap.core.services.credentials import collect_credentials


def _answers(*values: str):
    it = iter(values)
    asked: list[str] = []

    def ask(label: str) -> str:
        asked.append(label)
        return next(it)

    ask.asked = asked  # type: ignore[attr-defined]
    return ask


class TestCollectCredentials:
    def test_collects_both(self, settings, console):
        ask = _answers("ghp_token", "vault-pw")
        result, creds = collect_credentials(settings, ask, console)
        assert result.ok
        assert creds is not None
        assert creds.token.reveal() == "ghp_token"
        assert creds.vault_file.path == settings.vault_pass_path
        assert ask.asked == ["Enter your GitHub PAT", "Enter your vault passphrase"]

    def test_file_not_written_until_guard_entered(self, settings, console):
        result, creds = collect_credentials(settings, _answers("t", "p"), console)
        assert not settings.vault_pass_path.exists()
        with creds.vault_file:
            assert settings.vault_pass_path.read_text() == "p\n"
        assert not settings.vault_pass_path.exists()

    def test_empty_token(self, settings, console):
        ask = _answers("")
        result, creds = collect_credentials(settings, ask, console)
        assert result.failed
        assert result.message == "PAT cannot be empty"
        assert creds is None
        assert len(ask.asked) == 1

    def test_whitespace_token_is_empty(self, settings, console):
        result, creds = collect_credentials(settings, _answers("   "), console)
        assert result.failed
        assert creds is None

    def test_empty_passphrase(self, settings, console):
        result, creds = collect_credentials(settings, _answers("tok", ""), console)
        assert result.failed
        assert "passphrase cannot be empty" in result.message
        assert creds is None
        assert not settings.vault_pass_path.exists()

    def test_whitespace_passphrase_is_kept_verbatim(self, settings, console):
        result, creds = collect_credentials(settings, _answers("tok", "  "), console)
        assert result.ok
        with creds.vault_file:
            assert settings.vault_pass_path.read_text() == "  \n"

    def test_guidance_printed(self, settings, console, capsys):
        collect_credentials(settings, _answers("t", "p"), console)
        out = capsys.readouterr().out
        assert "personal-access-tokens" in out
        assert "Contents: Read/Write" in out
        assert "joelagnel/joel-snips" in out
