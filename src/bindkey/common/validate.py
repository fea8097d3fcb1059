"""Base exception classes for errors loading private keys."""

import logging
from pathlib import Path

__author__ = "ft"


logger = logging.getLogger(__name__)


class PrivateKeyError(Exception):
    """Base class exception for all errors loading a private key file."""

    def __init__(self, message: str, filename: Path | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.filename = filename

    def __str__(self) -> str:
        if self.filename is not None:
            return f"{self.filename}: {self.message}"
        return self.message


class ProviderUnavailable(PrivateKeyError):
    """The cryptographic backend needed to construct the key is not available."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"Crypto provider {provider!r} unavailable: {reason}")
        self.provider = provider
        self.reason = reason


class KeyConstructionFailed(PrivateKeyError):
    """The crypto provider rejected the key parameters."""

    def __init__(self, diagnostic: str) -> None:
        super().__init__(diagnostic)
        self.diagnostic = diagnostic
