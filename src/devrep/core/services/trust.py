from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Protocol

from pydantic import ValidationError

from devrep.core.models import (
    CredentialKind,
    EndorsementAggregate,
    EndorsementCredential,
    Evidence,
    PortfolioCredential,
    ProficiencyLevel,
    ProjectCredential,
    ReputationReport,
    SkillCredential,
    SkillEdge,
    SkillGraph,
    SkillNode,
)
from devrep.core.services.reputation import round_half_up
from devrep.core.services.verify import verify_credentials

LEVEL_BASE: dict[ProficiencyLevel, int] = {
    ProficiencyLevel.beginner: 25,
    ProficiencyLevel.intermediate: 50,
    ProficiencyLevel.advanced: 75,
    ProficiencyLevel.expert: 100,
}

# evidence needed for each factor to saturate
FULL_COMMITS = 100
FULL_LINES_OF_CODE = 10_000
FULL_PROJECTS = 5
# shared projects for an edge of strength 1
FULL_SHARED_PROJECTS = 3

DEFAULT_WEIGHTS: dict[str, float] = {
    CredentialKind.portfolio.value: 0.4,
    CredentialKind.skill.value: 0.3,
    CredentialKind.project.value: 0.2,
    CredentialKind.endorsement.value: 0.1,
}


def _factor(amount: float, full: float) -> float:
    return min(max(amount, 0) / full, 1)


def _rating(value: float) -> float:
    return min(max(value, 0), 5)


def _as_evidence(value: Any) -> Evidence:
    if isinstance(value, Evidence):
        return value
    try:
        return Evidence.model_validate(value or {})
    except ValidationError:
        return Evidence()


def compute_skill_score(level: ProficiencyLevel, evidence: Evidence | Mapping[str, Any] | None = None) -> int:
    """Scale the level's base value by how much evidence backs it.

    The multiplier runs from 0.4 with no evidence to 1.0 once commits,
    lines of code and project count are all saturated.
    """
    evidence = _as_evidence(evidence)
    try:
        base = LEVEL_BASE[ProficiencyLevel(level)]
    except ValueError:
        base = 0
    multiplier = (
        0.4
        + 0.2 * _factor(evidence.commit_count, FULL_COMMITS)
        + 0.2 * _factor(evidence.lines_of_code, FULL_LINES_OF_CODE)
        + 0.2 * _factor(len(evidence.project_names), FULL_PROJECTS)
    )
    return round_half_up(min(base * multiplier, 100))


def credential_score(credential: Any) -> float | None:
    """Per-credential score on a 0-100 scale; None for kinds that do not count."""
    if isinstance(credential, PortfolioCredential):
        return max(credential.reputation_score, 0)
    if isinstance(credential, SkillCredential):
        return compute_skill_score(credential.proficiency_level, credential.evidence)
    if isinstance(credential, ProjectCredential):
        return min(max(credential.commit_count, 0) * 0.1, 100)
    if isinstance(credential, EndorsementCredential):
        return _rating(credential.rating) * 20
    return None


class TrustScorePolicy(Protocol):
    name: ClassVar[str]

    def score(self, credentials: Iterable[Any]) -> int:
        ...


@dataclass(frozen=True)
class WeightedAveragePolicy:
    """Every credential adds score*weight and weight; result is the ratio.

    Several credentials of one kind therefore pull the average toward that
    kind. This is the historical behaviour and the default.
    """

    name: ClassVar[str] = "weighted-average"
    weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))

    def score(self, credentials: Iterable[Any]) -> int:
        score = 0.0
        weight = 0.0
        for cred in credentials:
            value = credential_score(cred)
            if value is None:
                continue
            w = self.weights.get(cred.kind, 0.0)
            score += value * w
            weight += w
        return round_half_up(score / weight) if weight > 0 else 0


@dataclass(frozen=True)
class PerKindAveragePolicy:
    """Average within each kind first, then weight-average across kinds present."""

    name: ClassVar[str] = "per-kind"
    weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))

    def score(self, credentials: Iterable[Any]) -> int:
        by_kind: dict[str, list[float]] = defaultdict(list)
        for cred in credentials:
            value = credential_score(cred)
            if value is not None:
                by_kind[cred.kind].append(value)
        score = 0.0
        weight = 0.0
        for kind, values in by_kind.items():
            w = self.weights.get(kind, 0.0)
            score += (sum(values) / len(values)) * w
            weight += w
        return round_half_up(score / weight) if weight > 0 else 0


DEFAULT_POLICY: TrustScorePolicy = WeightedAveragePolicy()


def compute_trust_score(credentials: Iterable[Any], policy: TrustScorePolicy | None = None) -> int:
    return (policy or DEFAULT_POLICY).score(credentials)


def aggregate_endorsements(endorsements: Iterable[Any]) -> list[EndorsementAggregate]:
    """One aggregate per endorsed skill, in order of first appearance.

    The recorded endorser_type is the one from the last endorsement seen for
    that skill.
    """
    aggregates: dict[str, EndorsementAggregate] = {}
    for e in endorsements:
        if not isinstance(e, EndorsementCredential):
            continue
        rating = _rating(e.rating)
        agg = aggregates.get(e.endorsed_skill_name)
        if agg is None:
            aggregates[e.endorsed_skill_name] = EndorsementAggregate(
                skill_name=e.endorsed_skill_name,
                endorser_type=e.endorser_type,
                running_average_rating=float(rating),
                count=1,
            )
            continue
        agg.running_average_rating = (agg.running_average_rating * agg.count + rating) / (agg.count + 1)
        agg.count += 1
        agg.endorser_type = e.endorser_type
    return list(aggregates.values())


def _skill_edges(skills: Sequence[SkillNode]) -> list[SkillEdge]:
    edges: list[SkillEdge] = []
    for i, left in enumerate(skills):
        for right in skills[i + 1 :]:
            shared = len(left.evidence.project_names & right.evidence.project_names)
            if shared > 0:
                edges.append(
                    SkillEdge(
                        from_skill=left.skill_name,
                        to_skill=right.skill_name,
                        strength=min(shared / FULL_SHARED_PROJECTS, 1),
                    )
                )
    return edges


def build_skill_graph(credentials: Iterable[Any]) -> SkillGraph:
    creds = list(credentials)
    skills = [
        SkillNode(
            skill_name=c.skill_name,
            proficiency_level=c.proficiency_level,
            evidence=c.evidence.model_copy(deep=True),
        )
        for c in creds
        if isinstance(c, SkillCredential)
    ]
    return SkillGraph(
        skills=skills,
        connections=_skill_edges(skills),
        endorsements=aggregate_endorsements(creds),
    )


def credentials_of_kind(credentials: Iterable[Any], kind: str | CredentialKind | None = None) -> list[Any]:
    if kind is None or kind == "all":
        return list(credentials)
    wanted = CredentialKind(kind).value
    return [c for c in credentials if getattr(c, "kind", None) == wanted]


def developer_reputation(
    credentials: Iterable[Any],
    policy: TrustScorePolicy | None = None,
    now: datetime | None = None,
) -> ReputationReport:
    """Trust score, skill graph and per-credential verification in one report.

    Expired credentials are flagged in the verification results; they still
    count toward the trust score.
    """
    creds = list(credentials)
    return ReputationReport(
        trust_score=compute_trust_score(creds, policy),
        skill_graph=build_skill_graph(creds),
        credentials=creds,
        verification=verify_credentials(creds, now),
    )
