from __future__ import annotations

import os
import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from devrep.core.models import CREDENTIAL_ADAPTER, CredentialKind
from devrep.utils import get_logger

from .base import CredentialNotFoundError, CredentialRepository, DuplicateCredentialError, kind_value

log = get_logger()


def _default_cache_path() -> Path:
    env = os.getenv("DEVREP_CACHE_DB")
    if env:
        return Path(env).expanduser()
    base = Path(os.getenv("XDG_CACHE_HOME", Path.home() / ".cache"))
    path = base / "devrep" / "cache.sqlite"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


@dataclass
class HttpCache:
    """ETag cache for GitHub GET requests."""

    path: Path = field(default_factory=_default_cache_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS http_cache (
                url TEXT PRIMARY KEY,
                etag TEXT,
                last_modified TEXT,
                body TEXT,
                fetched_at TEXT
            )
            """
        )
        return conn

    def get(self, url: str) -> Optional[dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.execute(
                "SELECT etag, last_modified, body, fetched_at FROM http_cache WHERE url=?",
                (url,),
            )
            row = cur.fetchone()
            if not row:
                return None
            etag, last_modified, body, fetched_at = row
            return {
                "etag": etag,
                "last_modified": last_modified,
                "body": body,
                "fetched_at": fetched_at,
            }

    def set(self, url: str, etag: Optional[str], last_modified: Optional[str], body: str, fetched_at: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "REPLACE INTO http_cache(url, etag, last_modified, body, fetched_at) VALUES (?, ?, ?, ?, ?)",
                (url, etag, last_modified, body, fetched_at),
            )


class SQLiteCredentialRepository(CredentialRepository):
    def __init__(self, dsn: str) -> None:
        # dsn examples: sqlite:///abs/path.db, sqlite:///:memory:
        if dsn == "sqlite:///:memory:":
            self.path = ":memory:"
        elif dsn.startswith("sqlite:///"):
            self.path = dsn[len("sqlite:///") :]
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        else:
            raise ValueError(f"Unsupported sqlite DSN: {dsn}")
        self._conn = sqlite3.connect(self.path)

    def ensure_schema(self) -> None:
        with self._conn as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS devrep_credentials (
                    id TEXT PRIMARY KEY,
                    subject_id TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    issued_at TEXT NOT NULL,
                    body TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS devrep_credentials_subject ON devrep_credentials (subject_id, kind)"
            )

    def _insert(self, conn: sqlite3.Connection, credential: Any) -> None:
        try:
            conn.execute(
                "INSERT INTO devrep_credentials (id, subject_id, kind, issued_at, body) VALUES (?,?,?,?,?)",
                (
                    credential.id,
                    credential.subject_id,
                    credential.kind,
                    credential.issued_at.isoformat(),
                    credential.model_dump_json(),
                ),
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateCredentialError(credential.id) from e

    def add(self, credential: Any) -> Any:
        with self._conn as conn:
            self._insert(conn, credential)
        log.info("repository.add", backend="sqlite", id=credential.id, kind=credential.kind)
        return credential

    def add_many(self, credentials: Iterable[Any]) -> list[Any]:
        batch = list(credentials)
        # one transaction: a duplicate rolls back the whole batch
        with self._conn as conn:
            for c in batch:
                self._insert(conn, c)
        log.info("repository.add_many", backend="sqlite", count=len(batch))
        return batch

    def get(self, credential_id: str) -> Any:
        row = self._conn.execute(
            "SELECT body FROM devrep_credentials WHERE id=?", (credential_id,)
        ).fetchone()
        if row is None:
            raise CredentialNotFoundError(credential_id)
        return CREDENTIAL_ADAPTER.validate_json(row[0])

    def list(self, subject_id: str | None = None, kind: str | CredentialKind | None = None) -> list[Any]:
        sql = "SELECT body FROM devrep_credentials"
        clauses: list[str] = []
        params: list[str] = []
        if subject_id is not None:
            clauses.append("subject_id=?")
            params.append(subject_id)
        wanted = kind_value(kind)
        if wanted is not None:
            clauses.append("kind=?")
            params.append(wanted)
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY rowid"
        return [CREDENTIAL_ADAPTER.validate_json(body) for (body,) in self._conn.execute(sql, params)]

    def update(self, credential: Any) -> Any:
        with self._conn as conn:
            cur = conn.execute(
                "UPDATE devrep_credentials SET subject_id=?, kind=?, issued_at=?, body=? WHERE id=?",
                (
                    credential.subject_id,
                    credential.kind,
                    credential.issued_at.isoformat(),
                    credential.model_dump_json(),
                    credential.id,
                ),
            )
        if cur.rowcount == 0:
            raise CredentialNotFoundError(credential.id)
        log.info("repository.update", backend="sqlite", id=credential.id)
        return credential

    def delete(self, credential_id: str) -> None:
        with self._conn as conn:
            cur = conn.execute("DELETE FROM devrep_credentials WHERE id=?", (credential_id,))
        if cur.rowcount == 0:
            raise CredentialNotFoundError(credential_id)
        log.info("repository.delete", backend="sqlite", id=credential_id)

    def close(self) -> None:
        self._conn.close()
