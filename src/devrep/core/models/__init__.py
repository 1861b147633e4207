from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _zero_if_none(v: Any) -> Any:
    return 0 if v is None else v


def _empty_if_none(v: Any) -> Any:
    return [] if v is None else v


def _default_if_none(v: Any) -> Any:
    return {} if v is None else v


# Missing metrics read as zero and missing name sets as empty.
Count = Annotated[int, BeforeValidator(_zero_if_none)]
Amount = Annotated[float, BeforeValidator(_zero_if_none)]
NameSet = Annotated[set[str], BeforeValidator(_empty_if_none)]
NameList = Annotated[list[str], BeforeValidator(_empty_if_none)]


class _Model(BaseModel):
    # accept both snake_case and the camelCase keys emitted by the web frontend
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProficiencyLevel(str, Enum):
    beginner = "Beginner"
    intermediate = "Intermediate"
    advanced = "Advanced"
    expert = "Expert"


class EndorserType(str, Enum):
    peer = "Peer"
    mentor = "Mentor"
    employer = "Employer"
    community = "Community"


class CredentialKind(str, Enum):
    portfolio = "portfolio"
    skill = "skill"
    project = "project"
    endorsement = "endorsement"
    community_badge = "community_badge"


class ProjectRole(str, Enum):
    contributor = "Contributor"
    maintainer = "Maintainer"
    creator = "Creator"
    reviewer = "Reviewer"


class BadgeType(str, Enum):
    member = "Member"
    contributor = "Contributor"
    mentor = "Mentor"
    organizer = "Organizer"
    speaker = "Speaker"


class BadgeLevel(str, Enum):
    bronze = "Bronze"
    silver = "Silver"
    gold = "Gold"
    platinum = "Platinum"


class ActivitySnapshot(_Model):
    """Point-in-time GitHub activity counters for one developer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    followers: Count = 0
    total_stars: Count = 0
    total_repositories: Count = 0
    account_age_days: Count = 0
    recent_activity_count: Count = 0
    total_forks: Count = 0


class Evidence(_Model):
    repository_names: NameSet = Field(default_factory=set)
    commit_count: Count = 0
    lines_of_code: Count = 0
    project_names: NameSet = Field(default_factory=set)


class ContributionMetrics(_Model):
    commits: Count = 0
    lines_added: Count = 0
    lines_removed: Count = 0
    pull_requests: Count = 0
    issues_resolved: Count = 0


class _CredentialBase(_Model):
    id: str = ""
    subject_id: str
    issuer: Optional[str] = None
    issued_at: datetime = Field(default_factory=_utcnow)
    expires_at: Optional[datetime] = None

    @model_validator(mode="after")
    def fill_default_id(self) -> "_CredentialBase":
        if not self.id:
            self.id = f"did:devrep:{getattr(self, 'kind', 'credential')}:{uuid.uuid4().hex}"
        return self

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        ref = now or _utcnow()
        if ref.tzinfo is None:
            ref = ref.replace(tzinfo=UTC)
        exp = self.expires_at if self.expires_at.tzinfo else self.expires_at.replace(tzinfo=UTC)
        return exp < ref


class PortfolioCredential(_CredentialBase):
    kind: Literal["portfolio"] = "portfolio"
    reputation_score: Amount = 0
    top_languages: NameList = Field(default_factory=list)
    account_age_days: Count = 0
    github_username: Optional[str] = None


class SkillCredential(_CredentialBase):
    kind: Literal["skill"] = "skill"
    skill_name: str
    proficiency_level: ProficiencyLevel
    evidence: Annotated[Evidence, BeforeValidator(_default_if_none)] = Field(default_factory=Evidence)


class ProjectCredential(_CredentialBase):
    kind: Literal["project"] = "project"
    project_name: str = ""
    project_url: Optional[str] = None
    role: ProjectRole = ProjectRole.contributor
    contribution_metrics: Annotated[ContributionMetrics, BeforeValidator(_default_if_none)] = Field(
        default_factory=ContributionMetrics
    )

    @property
    def commit_count(self) -> int:
        return self.contribution_metrics.commits


class EndorsementCredential(_CredentialBase):
    kind: Literal["endorsement"] = "endorsement"
    endorsed_skill_name: str
    endorser_type: EndorserType
    rating: Count = 0
    endorsement_text: str = ""


class CommunityBadgeCredential(_CredentialBase):
    kind: Literal["community_badge"] = "community_badge"
    community_name: str
    badge_type: BadgeType = BadgeType.member
    badge_level: BadgeLevel = BadgeLevel.bronze
    achievements: NameList = Field(default_factory=list)


Credential = Annotated[
    Union[
        PortfolioCredential,
        SkillCredential,
        ProjectCredential,
        EndorsementCredential,
        CommunityBadgeCredential,
    ],
    Field(discriminator="kind"),
]

CREDENTIAL_ADAPTER: TypeAdapter[Any] = TypeAdapter(Credential)
CREDENTIAL_LIST_ADAPTER: TypeAdapter[Any] = TypeAdapter(list[Credential])


class SkillNode(_Model):
    skill_name: str
    proficiency_level: ProficiencyLevel
    evidence: Evidence


class SkillEdge(_Model):
    # unordered pair, stored once: from_skill precedes to_skill in the skills list
    from_skill: str
    to_skill: str
    relationship_kind: Literal["related"] = "related"
    strength: float


class EndorsementAggregate(_Model):
    skill_name: str
    endorser_type: EndorserType
    running_average_rating: float
    count: int


class SkillGraph(_Model):
    skills: list[SkillNode] = Field(default_factory=list)
    connections: list[SkillEdge] = Field(default_factory=list)
    endorsements: list[EndorsementAggregate] = Field(default_factory=list)


class CredentialVerification(_Model):
    credential_id: str
    valid: bool
    expired: bool
    verified_at: datetime = Field(default_factory=_utcnow)


class VerificationReport(_Model):
    # a developer counts as verified once any one credential checks out
    verified: bool = False
    results: list[CredentialVerification] = Field(default_factory=list)


class ReputationReport(_Model):
    trust_score: int
    skill_graph: SkillGraph
    credentials: list[Credential] = Field(default_factory=list)
    verification: VerificationReport = Field(default_factory=VerificationReport)
