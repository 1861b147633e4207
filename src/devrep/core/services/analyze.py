from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from devrep.core.models import ActivitySnapshot, PortfolioCredential
from devrep.core.services.reputation import compute_reputation_score, reputation_breakdown, top_languages
from devrep.providers import Provider, get_provider
from devrep.providers.github import GitHubActivity
from devrep.utils import get_logger

log = get_logger()


@dataclass
class AnalysisResult:
    login: str
    activity: GitHubActivity
    reputation_score: int
    top_languages: list[dict[str, object]]
    summary: dict[str, Any]

    @property
    def snapshot(self) -> ActivitySnapshot:
        return self.activity.snapshot

    def to_portfolio_credential(self, subject_id: str, issuer: str | None = None) -> PortfolioCredential:
        return PortfolioCredential(
            subject_id=subject_id,
            issuer=issuer,
            github_username=self.login,
            reputation_score=self.reputation_score,
            top_languages=[str(t["language"]) for t in self.top_languages],
            account_age_days=self.snapshot.account_age_days,
        )


def analyze_github_user(
    login: str,
    provider: Provider | None = None,
    max_repos: int | None = None,
    languages_limit: int = 5,
) -> AnalysisResult:
    """Fetch a user's public GitHub activity and score it."""
    gh = provider or get_provider("github")
    activity = gh.fetch_activity(login, limit=max_repos)
    score = compute_reputation_score(activity.snapshot)
    langs = top_languages(activity.languages, limit=languages_limit)
    summary = {
        "login": login,
        "reputation_score": score,
        "breakdown": reputation_breakdown(activity.snapshot),
        "organizations": activity.organizations,
        **activity.snapshot.model_dump(),
    }
    log.info("analyze.done", login=login, reputation_score=score)
    return AnalysisResult(
        login=login,
        activity=activity,
        reputation_score=score,
        top_languages=langs,
        summary=summary,
    )
