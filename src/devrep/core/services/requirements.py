from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

from pydantic import BaseModel, Field

from devrep.core.models import PortfolioCredential, SkillCredential


class Requirements(BaseModel):
    min_reputation_score: Optional[float] = None
    required_skills: list[str] = Field(default_factory=list)
    min_experience_years: Optional[float] = None


class RequirementsResult(BaseModel):
    qualified: bool
    missing_requirements: list[str] = Field(default_factory=list)
    verified_skills: list[str] = Field(default_factory=list)


def _dedupe(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))




def _has_skill(skill: str, languages: list[str], skill_names: set[str]) -> bool:
    wanted = skill.lower()
    return any(wanted in lang.lower() for lang in languages) or wanted in skill_names


def check_requirements(credentials: Iterable[Any], requirements: Requirements) -> RequirementsResult:
    """Check a developer's credentials against a job's minimum requirements.

    A required skill is met by a portfolio top language containing it
    (case-insensitive) or by a skill credential of the same name. Required
    skills are listed as verified only when all of them are met.
    """
    creds = list(credentials)
    missing: list[str] = []
    verified: list[str] = []

    skill_names = [c.skill_name for c in creds if isinstance(c, SkillCredential)]
    portfolio = next((c for c in creds if isinstance(c, PortfolioCredential)), None)
    if portfolio is None:
        missing.append("Developer portfolio credential required")
    else:
        if (
            requirements.min_reputation_score is not None
            and portfolio.reputation_score < requirements.min_reputation_score
        ):
            missing.append(f"Reputation score must be at least {requirements.min_reputation_score:g}")
        if requirements.required_skills:
            lowered = {s.lower() for s in skill_names}
            absent = [
                s for s in requirements.required_skills
                if not _has_skill(s, portfolio.top_languages, lowered)
            ]
            if absent:
                missing.append(f"Missing required skills: {', '.join(absent)}")
            else:
                verified.extend(requirements.required_skills)
        if (
            requirements.min_experience_years is not None
            and portfolio.account_age_days < requirements.min_experience_years * 365
        ):
            missing.append(f"Must have at least {requirements.min_experience_years:g} years of experience")

    verified.extend(skill_names)
    return RequirementsResult(
        qualified=not missing,
        missing_requirements=missing,
        verified_skills=_dedupe(verified),
    )
