from __future__ import annotations

from .reputation import compute_reputation_score, reputation_breakdown, top_languages
from .requirements import Requirements, RequirementsResult, check_requirements
from .trust import (
    PerKindAveragePolicy,
    TrustScorePolicy,
    WeightedAveragePolicy,
    aggregate_endorsements,
    build_skill_graph,
    compute_skill_score,
    compute_trust_score,
    credentials_of_kind,
    developer_reputation,
)
from .verify import verify_credential, verify_credentials

__all__ = [
    "PerKindAveragePolicy",
    "Requirements",
    "RequirementsResult",
    "TrustScorePolicy",
    "WeightedAveragePolicy",
    "aggregate_endorsements",
    "build_skill_graph",
    "check_requirements",
    "compute_reputation_score",
    "compute_skill_score",
    "compute_trust_score",
    "credentials_of_kind",
    "developer_reputation",
    "reputation_breakdown",
    "top_languages",
    "verify_credential",
    "verify_credentials",
]
