"""Developer reputation scoring and credential trust engine."""

__version__ = "0.1.0"

from devrep.core.models import (  # noqa: E402
    ActivitySnapshot,
    CommunityBadgeCredential,
    Credential,
    EndorsementAggregate,
    EndorsementCredential,
    EndorserType,
    Evidence,
    PortfolioCredential,
    ProficiencyLevel,
    ProjectCredential,
    SkillCredential,
    SkillEdge,
    SkillGraph,
    SkillNode,
)
from devrep.core.services import (  # noqa: E402
    aggregate_endorsements,
    build_skill_graph,
    compute_reputation_score,
    compute_skill_score,
    compute_trust_score,
)

__all__ = [
    "ActivitySnapshot",
    "CommunityBadgeCredential",
    "Credential",
    "EndorsementAggregate",
    "EndorsementCredential",
    "EndorserType",
    "Evidence",
    "PortfolioCredential",
    "ProficiencyLevel",
    "ProjectCredential",
    "SkillCredential",
    "SkillEdge",
    "SkillGraph",
    "SkillNode",
    "aggregate_endorsements",
    "build_skill_graph",
    "compute_reputation_score",
    "compute_skill_score",
    "compute_trust_score",
]
