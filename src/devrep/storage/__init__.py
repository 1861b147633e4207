from __future__ import annotations

from .base import CredentialNotFoundError, CredentialRepository, DuplicateCredentialError, open_repository

__all__ = ["CredentialNotFoundError", "CredentialRepository", "DuplicateCredentialError", "open_repository"]
