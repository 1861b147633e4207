from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone

import httpx
import structlog
from dateutil import parser as dateutil_parser
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from devrep import __version__

USER_AGENT = f"devrep/{__version__}"


def get_logger() -> structlog.stdlib.BoundLogger:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )
    return structlog.get_logger()


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def github_token_from_env() -> str:
    token = os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN") or ""
    if not token:
        raise RuntimeError("GitHub token not found. Set GITHUB_TOKEN or GH_TOKEN.")
    return token


def github_auth_headers() -> dict[str, str]:
    token = github_token_from_env()
    return {"Authorization": f"Bearer {token}", "Accept": "application/vnd.github+json"}


def http_client(transport: httpx.BaseTransport | None = None) -> httpx.Client:
    return httpx.Client(timeout=30.0, headers={"User-Agent": USER_AGENT}, transport=transport)


@retry(
    reraise=True,
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(httpx.HTTPError),
)
def http_get(client: httpx.Client, url: str, headers: dict[str, str]) -> httpx.Response:
    return client.get(url, headers=headers)


def parse_since(since: str | None, max_days: int | None = 180) -> str | None:
    """Accept ISO-8601 or relative like '30d', '12h'. Return ISO string (UTC).

    If max_days is set, clamp the earliest date to now - max_days.
    """
    if not since:
        return None
    s = since.strip().lower()
    if s.endswith("d") and s[:-1].isdigit():
        days = int(s[:-1])
        if max_days is not None:
            days = min(days, max_days)
        return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
    if s.endswith("h") and s[:-1].isdigit():
        hours = int(s[:-1])
        return (datetime.now(timezone.utc) - timedelta(hours=hours)).isoformat()
    dt = dateutil_parser.isoparse(since.strip())
    if not dt.tzinfo:
        dt = dt.replace(tzinfo=timezone.utc)
    if max_days is not None:
        earliest = datetime.now(timezone.utc) - timedelta(days=max_days)
        if dt < earliest:
            dt = earliest
    return dt.isoformat()


def days_since(timestamp: str | datetime | None, now: datetime | None = None) -> int:
    """Whole days elapsed since an ISO timestamp; 0 when missing or in the future."""
    if not timestamp:
        return 0
    dt = timestamp if isinstance(timestamp, datetime) else dateutil_parser.isoparse(timestamp)
    if not dt.tzinfo:
        dt = dt.replace(tzinfo=timezone.utc)
    ref = now or datetime.now(timezone.utc)
    return max(0, (ref - dt).days)


def parse_link_next(link_header: str | None) -> str | None:
    if not link_header:
        return None
    # format: <url1>; rel="next", <url2>; rel="last"
    parts = [p.strip() for p in link_header.split(",")]
    for p in parts:
        if 'rel="next"' in p:
            start = p.find("<")
            end = p.find(">", start + 1)
            if start != -1 and end != -1:
                return p[start + 1 : end]
    return None
