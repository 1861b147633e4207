from __future__ import annotations

from .client import (
    GitHubActivity,
    GitHubAuthError,
    GitHubError,
    GitHubNotFound,
    GitHubProvider,
    GitHubRateLimited,
    GitHubUserNotFound,
)

__all__ = [
    "GitHubActivity",
    "GitHubAuthError",
    "GitHubError",
    "GitHubNotFound",
    "GitHubProvider",
    "GitHubRateLimited",
    "GitHubUserNotFound",
]
