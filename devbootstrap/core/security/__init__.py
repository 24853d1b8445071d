from devbootstrap.core.security.secrets import AccessToken, SecretClearedError, VaultPassFile

__all__ = ["AccessToken", "SecretClearedError", "VaultPassFile"]
