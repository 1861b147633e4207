from __future__ import annotations

import pytest

from devrep.core.models import (
    CommunityBadgeCredential,
    EndorsementCredential,
    EndorserType,
    Evidence,
    PortfolioCredential,
    ProficiencyLevel,
    ProjectCredential,
    SkillCredential,
)

SUBJECT = "did:devrep:developer:octocat"


def make_skill(
    name: str,
    level: ProficiencyLevel = ProficiencyLevel.advanced,
    projects: set[str] | None = None,
    commits: int = 0,
    loc: int = 0,
) -> SkillCredential:
    return SkillCredential(
        subject_id=SUBJECT,
        skill_name=name,
        proficiency_level=level,
        evidence=Evidence(commit_count=commits, lines_of_code=loc, project_names=projects or set()),
    )


def make_endorsement(skill: str, rating: int, endorser: EndorserType = EndorserType.peer) -> EndorsementCredential:
    return EndorsementCredential(
        subject_id=SUBJECT,
        endorsed_skill_name=skill,
        endorser_type=endorser,
        rating=rating,
    )


@pytest.fixture
def portfolio() -> PortfolioCredential:
    return PortfolioCredential(
        subject_id=SUBJECT,
        reputation_score=90,
        top_languages=["JavaScript", "TypeScript", "Python"],
        account_age_days=1000,
        github_username="octocat",
    )


@pytest.fixture
def mixed_credentials(portfolio: PortfolioCredential) -> list:
    return [
        portfolio,
        make_skill("Python", ProficiencyLevel.expert, {"api", "cli", "etl"}, commits=100, loc=10_000),
        make_skill("SQL", ProficiencyLevel.intermediate, {"etl"}),
        ProjectCredential(subject_id=SUBJECT, project_name="api", contribution_metrics={"commits": 500}),
        make_endorsement("Python", 5, EndorserType.mentor),
        make_endorsement("Python", 3, EndorserType.employer),
        CommunityBadgeCredential(subject_id=SUBJECT, community_name="PyLadies"),
    ]


@pytest.fixture(name="make_skill")
def make_skill_fixture():
    return make_skill


@pytest.fixture(name="make_endorsement")
def make_endorsement_fixture():
    return make_endorsement
