from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from devrep.core.models import CREDENTIAL_ADAPTER, CredentialVerification, VerificationReport


def _has_structure(credential: Any) -> bool:
    return bool(credential.id and credential.subject_id and credential.issuer)


def verify_credential(credential: Any, now: datetime | None = None) -> CredentialVerification:
    """Check one credential's structure and expiry.

    Raw input is parsed first; anything that does not parse is reported
    invalid but not expired.
    """
    now = now or datetime.now(UTC)
    if not hasattr(credential, "is_expired"):
        try:
            credential = CREDENTIAL_ADAPTER.validate_python(credential)
        except ValidationError:
            raw_id = credential.get("id") if isinstance(credential, Mapping) else None
            return CredentialVerification(
                credential_id=str(raw_id or ""), valid=False, expired=False, verified_at=now
            )
    expired = credential.is_expired(now)
    return CredentialVerification(
        credential_id=credential.id,
        valid=_has_structure(credential) and not expired,
        expired=expired,
        verified_at=now,
    )


def verify_credentials(credentials: Iterable[Any], now: datetime | None = None) -> VerificationReport:
    now = now or datetime.now(UTC)
    results = [verify_credential(c, now) for c in credentials]
    return VerificationReport(verified=any(r.valid for r in results), results=results)
