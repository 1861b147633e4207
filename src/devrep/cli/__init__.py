from __future__ import annotations

import json
import re
import sys
from typing import Any

import typer
from pydantic import ValidationError
from rich import print as rprint

from devrep.core.models import CREDENTIAL_LIST_ADAPTER, ActivitySnapshot, Evidence, ProficiencyLevel
from devrep.core.rules import load_policy
from devrep.core.services import (
    Requirements,
    aggregate_endorsements,
    build_skill_graph,
    check_requirements,
    compute_reputation_score,
    compute_skill_score,
    compute_trust_score,
    developer_reputation,
    reputation_breakdown,
    verify_credentials,
)
from devrep.core.services.analyze import analyze_github_user
from devrep.exporters.json import write_json
from devrep.providers.github import GitHubError
from devrep.storage import CredentialNotFoundError, DuplicateCredentialError, open_repository

app = typer.Typer(help="Developer reputation CLI")
store_app = typer.Typer(help="Manage a credential store")
app.add_typer(store_app, name="store")

LOGIN_RE = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}")


@app.command()
def version() -> None:
    """Show version."""
    from devrep import __version__

    rprint({"devrep": __version__})


def _read_json_input(path: str) -> Any:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _read_credentials(path: str) -> list[Any]:
    payload = _read_json_input(path)
    if isinstance(payload, dict):
        payload = payload.get("credentials", [])
    try:
        return CREDENTIAL_LIST_ADAPTER.validate_python(payload)
    except ValidationError as e:
        raise typer.BadParameter(f"Invalid credentials input: {e}") from e


def _validate_login(login: str) -> str:
    if not LOGIN_RE.fullmatch(login or ""):
        raise typer.BadParameter("Invalid GitHub login. Use profile name like 'octocat'.")
    return login


def _fail(message: str) -> None:
    rprint({"ok": False, "error": message})
    raise typer.Exit(code=1)


@app.command()
def reputation(
    input: str | None = typer.Option(None, help="Activity snapshot JSON path or - for stdin"),
    login: str | None = typer.Option(None, help="Fetch the snapshot from GitHub for this login"),
    out: str = typer.Option("-", help="Output destination (path or - for stdout)"),
) -> None:
    """Compute the reputation score from an activity snapshot."""
    if (input is None) == (login is None):
        raise typer.BadParameter("Pass exactly one of --input or --login")
    if login is not None:
        try:
            snapshot = analyze_github_user(_validate_login(login)).snapshot
        except GitHubError as e:
            _fail(str(e))
            return
    else:
        try:
            snapshot = ActivitySnapshot.model_validate(_read_json_input(input or "-"))
        except ValidationError as e:
            raise typer.BadParameter(f"Invalid snapshot: {e}") from e
    write_json(
        {
            "reputation_score": compute_reputation_score(snapshot),
            "breakdown": reputation_breakdown(snapshot),
            "snapshot": snapshot,
        },
        out=out,
    )


@app.command("analyze-user")
def analyze_user(
    login: str = typer.Argument(..., help="GitHub login"),
    max_repos: int | None = typer.Option(None, help="Maximum repositories to inspect"),
    out: str = typer.Option("-", help="Output destination (path or - for stdout)"),
) -> None:
    """Analyze a GitHub user: fetch -> score -> output."""
    try:
        result = analyze_github_user(_validate_login(login), max_repos=max_repos)
    except GitHubError as e:
        _fail(str(e))
        return
    write_json(
        {
            "login": result.login,
            "reputation_score": result.reputation_score,
            "top_languages": result.top_languages,
            "summary": result.summary,
        },
        out=out,
    )


@app.command("skill-score")
def skill_score(
    level: ProficiencyLevel = typer.Argument(..., help="Beginner|Intermediate|Advanced|Expert"),
    commits: int = typer.Option(0, help="Commit count backing the skill"),
    loc: int = typer.Option(0, help="Lines of code backing the skill"),
    project: list[str] = typer.Option(None, help="Project name; repeat for several"),
) -> None:
    """Score one skill from its proficiency level and evidence."""
    evidence = Evidence(commit_count=commits, lines_of_code=loc, project_names=set(project or []))
    write_json({"level": level.value, "skill_score": compute_skill_score(level, evidence)})


@app.command("skill-graph")
def skill_graph(
    input: str = typer.Option("-", help="Credentials JSON path or - for stdin"),
    out: str = typer.Option("-", help="Output destination (path or - for stdout)"),
) -> None:
    """Build the skill graph from a developer's credentials."""
    write_json(build_skill_graph(_read_credentials(input)), out=out)


@app.command()
def endorsements(
    input: str = typer.Option("-", help="Credentials JSON path or - for stdin"),
    out: str = typer.Option("-", help="Output destination (path or - for stdout)"),
) -> None:
    """Aggregate endorsement credentials per skill."""
    write_json(aggregate_endorsements(_read_credentials(input)), out=out)


@app.command()
def trust(
    input: str = typer.Option("-", help="Credentials JSON path or - for stdin"),
    policy: str = typer.Option("default", help="Policy id (weighted-average|per-kind) or TOML path"),
    out: str = typer.Option("-", help="Output destination (path or - for stdout)"),
) -> None:
    """Compute the weighted trust score across credential kinds."""
    try:
        pol = load_policy(policy)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
    write_json({"trust_score": compute_trust_score(_read_credentials(input), pol), "policy": pol.name}, out=out)


@app.command()
def report(
    input: str = typer.Option("-", help="Credentials JSON path or - for stdin"),
    policy: str = typer.Option("default", help="Policy id (weighted-average|per-kind) or TOML path"),
    out: str = typer.Option("-", help="Output destination (path or - for stdout)"),
) -> None:
    """Trust score plus skill graph for one developer."""
    try:
        pol = load_policy(policy)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
    write_json(developer_reputation(_read_credentials(input), pol), out=out)


@app.command()
def verify(
    input: str = typer.Option("-", help="Credentials JSON path or - for stdin"),
    out: str = typer.Option("-", help="Output destination (path or - for stdout)"),
) -> None:
    """Check each credential's structure and expiry. Exit code 1 when none is valid."""
    payload = _read_json_input(input)
    if isinstance(payload, dict):
        payload = payload.get("credentials", [])
    if not isinstance(payload, list):
        raise typer.BadParameter("Invalid credentials input: expected a JSON list")
    result = verify_credentials(payload)
    write_json(result, out=out)
    if not result.verified:
        raise typer.Exit(code=1)


@app.command()
def check(
    input: str = typer.Option("-", help="Credentials JSON path or - for stdin"),
    min_reputation: float | None = typer.Option(None, help="Minimum portfolio reputation score"),
    min_years: float | None = typer.Option(None, help="Minimum account age in years"),
    skill: list[str] = typer.Option(None, help="Required skill or language; repeat for several"),
) -> None:
    """Check credentials against job requirements. Exit code 1 when not qualified."""
    reqs = Requirements(
        min_reputation_score=min_reputation,
        min_experience_years=min_years,
        required_skills=list(skill or []),
    )
    result = check_requirements(_read_credentials(input), reqs)
    write_json(result)
    if not result.qualified:
        raise typer.Exit(code=1)


@store_app.command("add")
def store_add(
    dsn: str = typer.Argument(..., help="Store DSN (sqlite:///path.db or memory://)"),
    input: str = typer.Option("-", help="Credentials JSON path or - for stdin"),
) -> None:
    """Persist credentials to the selected store."""
    creds = _read_credentials(input)
    with open_repository(dsn) as repo:
        try:
            repo.add_many(creds)
        except DuplicateCredentialError as e:
            _fail(f"Credential already stored: {e}")
    rprint({"saved": len(creds), "backend": dsn.split(":", 1)[0]})


@store_app.command("list")
def store_list(
    dsn: str = typer.Argument(..., help="Store DSN (sqlite:///path.db or memory://)"),
    subject: str | None = typer.Option(None, help="Only credentials about this subject"),
    kind: str = typer.Option("all", help="Credential kind or 'all'"),
    out: str = typer.Option("-", help="Output destination (path or - for stdout)"),
) -> None:
    """List stored credentials."""
    with open_repository(dsn) as repo:
        try:
            creds = repo.list(subject_id=subject, kind=kind)
        except ValueError as e:
            raise typer.BadParameter(str(e)) from e
    write_json(creds, out=out)


@store_app.command("remove")
def store_remove(
    dsn: str = typer.Argument(..., help="Store DSN (sqlite:///path.db or memory://)"),
    credential_id: str = typer.Argument(..., help="Credential id"),
) -> None:
    """Delete one stored credential."""
    with open_repository(dsn) as repo:
        try:
            repo.delete(credential_id)
        except CredentialNotFoundError:
            _fail(f"Credential not found: {credential_id}")
    rprint({"removed": credential_id})
