from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from devrep.core.models import CredentialKind
from devrep.utils import get_logger

from .base import CredentialNotFoundError, CredentialRepository, DuplicateCredentialError, kind_value

log = get_logger()


class InMemoryCredentialRepository(CredentialRepository):
    """Process-local store. Suitable for examples and tests."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}

    def ensure_schema(self) -> None:
        return None

    def add(self, credential: Any) -> Any:
        if credential.id in self._items:
            raise DuplicateCredentialError(credential.id)
        self._items[credential.id] = credential.model_copy(deep=True)
        log.info("repository.add", backend="memory", id=credential.id, kind=credential.kind)
        return credential

    def add_many(self, credentials: Iterable[Any]) -> list[Any]:
        batch = list(credentials)
        seen: set[str] = set()
        for c in batch:
            if c.id in self._items or c.id in seen:
                raise DuplicateCredentialError(c.id)
            seen.add(c.id)
        for c in batch:
            self._items[c.id] = c.model_copy(deep=True)
        log.info("repository.add_many", backend="memory", count=len(batch))
        return batch

    def get(self, credential_id: str) -> Any:
        try:
            return self._items[credential_id].model_copy(deep=True)
        except KeyError:
            raise CredentialNotFoundError(credential_id) from None

    def list(self, subject_id: str | None = None, kind: str | CredentialKind | None = None) -> list[Any]:
        wanted = kind_value(kind)
        return [
            c.model_copy(deep=True)
            for c in self._items.values()
            if (subject_id is None or c.subject_id == subject_id) and (wanted is None or c.kind == wanted)
        ]

    def update(self, credential: Any) -> Any:
        if credential.id not in self._items:
            raise CredentialNotFoundError(credential.id)
        self._items[credential.id] = credential.model_copy(deep=True)
        log.info("repository.update", backend="memory", id=credential.id)
        return credential

    def delete(self, credential_id: str) -> None:
        if self._items.pop(credential_id, None) is None:
            raise CredentialNotFoundError(credential_id)
        log.info("repository.delete", backend="memory", id=credential_id)

    def close(self) -> None:
        self._items.clear()
