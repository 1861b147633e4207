from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from devrep.config import http_cache_enabled, max_repos
from devrep.core.models import ActivitySnapshot
from devrep.metrics import record
from devrep.storage.sqlite import HttpCache
from devrep.utils import (
    days_since,
    get_logger,
    github_auth_headers,
    http_client,
    http_get,
    parse_link_next,
    parse_since,
    utcnow_iso,
)

API_BASE = "https://api.github.com"
# commits are counted over this window, on the most recently updated repos only
RECENT_WINDOW = "30d"
RECENT_REPOS = 10

log = get_logger()


class GitHubError(RuntimeError):
    pass


class GitHubNotFound(GitHubError):
    pass


class GitHubUserNotFound(GitHubNotFound):
    pass


class GitHubAuthError(GitHubError):
    pass


class GitHubRateLimited(GitHubError):
    pass


class GitHubActivity(BaseModel):
    login: str
    snapshot: ActivitySnapshot
    languages: dict[str, int] = Field(default_factory=dict)
    organizations: list[str] = Field(default_factory=list)
    following: int = 0
    created_at: Optional[datetime] = None


def _raise_for_status(resp: httpx.Response) -> None:
    if resp.status_code == 401:
        raise GitHubAuthError("GitHub authentication failed. Please re-authenticate.")
    if resp.status_code in (403, 429):
        raise GitHubRateLimited("GitHub API rate limit exceeded. Please try again later.")
    if resp.status_code == 404:
        raise GitHubNotFound(str(resp.request.url))
    resp.raise_for_status()


class GitHubProvider:
    id = "github"

    def __init__(
        self,
        cache: HttpCache | None = None,
        transport: httpx.BaseTransport | None = None,
        use_cache: bool | None = None,
    ) -> None:
        if use_cache is None:
            use_cache = http_cache_enabled()
        self.cache = cache or (HttpCache() if use_cache else None)
        self.transport = transport

    def _auth_headers(self) -> dict[str, str]:
        return github_auth_headers()

    def _cached_get_json(self, client: httpx.Client, url: str) -> tuple[Any, str | None]:
        headers = self._auth_headers()
        cached = self.cache.get(url) if self.cache else None
        if cached and cached.get("etag"):
            headers["If-None-Match"] = cached["etag"]
        resp = http_get(client, url, headers=headers)
        if resp.status_code == 304 and cached:
            body = cached["body"]
        else:
            _raise_for_status(resp)
            body = resp.text
            if self.cache:
                self.cache.set(url, resp.headers.get("ETag"), resp.headers.get("Last-Modified"), body, utcnow_iso())
        return json.loads(body), parse_link_next(resp.headers.get("Link"))

    def _get_pages(self, client: httpx.Client, url: str, op: str, limit: int | None = None) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        next_url: str | None = url
        while next_url and (limit is None or len(items) < limit):
            with record(op):
                data, next_url = self._cached_get_json(client, next_url)
            items.extend(data)
        return items[:limit] if limit is not None else items

    def fetch_user(self, client: httpx.Client, login: str) -> dict[str, Any]:
        try:
            with record("github.user"):
                data, _ = self._cached_get_json(client, f"{API_BASE}/users/{login}")
        except GitHubNotFound as e:
            raise GitHubUserNotFound(f"GitHub user '{login}' not found") from e
        return data

    def fetch_user_repos(self, client: httpx.Client, login: str, limit: int | None = None) -> list[dict[str, Any]]:
        url = f"{API_BASE}/users/{login}/repos?per_page=100&type=owner&sort=updated"
        return self._get_pages(client, url, "github.repos", limit=limit)

    def fetch_user_orgs(self, client: httpx.Client, login: str) -> list[str]:
        orgs = self._get_pages(client, f"{API_BASE}/users/{login}/orgs?per_page=100", "github.orgs")
        return [str(o["login"]) for o in orgs if o.get("login")]

    def fetch_repo_languages(self, client: httpx.Client, full_name: str) -> dict[str, int]:
        with record("github.languages"):
            data, _ = self._cached_get_json(client, f"{API_BASE}/repos/{full_name}/languages")
        return {str(k): int(v) for k, v in (data or {}).items()}

    def count_recent_commits(self, client: httpx.Client, full_name: str, since: str | None) -> int:
        # first page only (up to 100 commits per repo)
        params = httpx.QueryParams({"per_page": 100, **({"since": since} if since else {})})
        with record("github.commits"):
            data, _ = self._cached_get_json(client, f"{API_BASE}/repos/{full_name}/commits?{params}")
        return len(data)

    def fetch_activity(self, login: str, limit: int | None = None) -> GitHubActivity:
        """Collect the counters behind a reputation score for one user."""
        log.info("github.fetch_activity", login=login)
        with http_client(self.transport) as client:
            user = self.fetch_user(client, login)
            repos = self.fetch_user_repos(client, login, limit=limit or max_repos())
            orgs = self.fetch_user_orgs(client, login)

            languages: dict[str, int] = {}
            for repo in repos:
                try:
                    for lang, size in self.fetch_repo_languages(client, repo["full_name"]).items():
                        languages[lang] = languages.get(lang, 0) + size
                except (GitHubNotFound, httpx.HTTPStatusError):
                    log.warning("github.languages_skipped", repo=repo.get("full_name"))
                    continue

            since = parse_since(RECENT_WINDOW)
            recent = 0
            for repo in repos[:RECENT_REPOS]:
                try:
                    recent += self.count_recent_commits(client, repo["full_name"], since)
                except (GitHubNotFound, httpx.HTTPStatusError):
                    # empty repositories answer 409
                    log.warning("github.commits_skipped", repo=repo.get("full_name"))
                    continue

        snapshot = ActivitySnapshot(
            followers=user.get("followers"),
            total_stars=sum(int(r.get("stargazers_count") or 0) for r in repos),
            total_repositories=user.get("public_repos"),
            account_age_days=days_since(user.get("created_at")),
            recent_activity_count=recent,
            total_forks=sum(int(r.get("forks_count") or 0) for r in repos),
        )
        log.info(
            "github.activity",
            login=login,
            repos=len(repos),
            followers=snapshot.followers,
            recent_activity=recent,
        )
        return GitHubActivity(
            login=login,
            snapshot=snapshot,
            languages=languages,
            organizations=orgs,
            following=int(user.get("following") or 0),
            created_at=user.get("created_at"),
        )
