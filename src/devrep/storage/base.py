from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from devrep.core.models import CredentialKind


class CredentialNotFoundError(KeyError):
    pass


class DuplicateCredentialError(ValueError):
    pass


class CredentialRepository(ABC):
    """CRUD store for credentials; scoring only ever sees lists loaded from here."""

    @abstractmethod
    def ensure_schema(self) -> None:  # idempotent
        ...

    @abstractmethod
    def add(self, credential: Any) -> Any:
        ...

    @abstractmethod
    def add_many(self, credentials: Iterable[Any]) -> list[Any]:
        """Add every credential or none of them."""
        ...

    @abstractmethod
    def get(self, credential_id: str) -> Any:
        ...

    @abstractmethod
    def list(self, subject_id: str | None = None, kind: str | CredentialKind | None = None) -> list[Any]:
        ...

    @abstractmethod
    def update(self, credential: Any) -> Any:
        ...

    @abstractmethod
    def delete(self, credential_id: str) -> None:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def __enter__(self) -> "CredentialRepository":
        try:
            self.ensure_schema()
        except Exception:
            self.close()
            raise
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def kind_value(kind: str | CredentialKind | None) -> str | None:
    if kind is None or kind == "all":
        return None
    return CredentialKind(kind).value


def open_repository(dsn: str) -> CredentialRepository:
    """Open a credential repository based on DSN.

    Examples:
    - memory://
    - sqlite:///absolute/path/to/file.db
    - sqlite:///:memory:
    """
    if dsn.startswith("memory://"):
        from .memory import InMemoryCredentialRepository

        return InMemoryCredentialRepository()
    if dsn.startswith("sqlite://"):
        from .sqlite import SQLiteCredentialRepository

        return SQLiteCredentialRepository(dsn)
    raise ValueError(f"Unsupported DSN: {dsn}")
