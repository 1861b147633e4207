from __future__ import annotations

import math

import pytest

from devrep.core.models import (
    CommunityBadgeCredential,
    EndorserType,
    Evidence,
    PortfolioCredential,
    ProficiencyLevel,
    ProjectCredential,
)
from devrep.core.services.trust import (
    LEVEL_BASE,
    PerKindAveragePolicy,
    WeightedAveragePolicy,
    aggregate_endorsements,
    build_skill_graph,
    compute_skill_score,
    compute_trust_score,
    credentials_of_kind,
    developer_reputation,
)

SUBJECT = "did:devrep:developer:octocat"


class TestComputeSkillScore:
    def test_full_evidence_expert(self) -> None:
        evidence = Evidence(commit_count=100, lines_of_code=10_000, project_names={"a", "b", "c", "d", "e"})
        assert compute_skill_score(ProficiencyLevel.expert, evidence) == 100

    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            (ProficiencyLevel.beginner, 10),
            (ProficiencyLevel.intermediate, 20),
            (ProficiencyLevel.advanced, 30),
            (ProficiencyLevel.expert, 40),
        ],
    )
    def test_no_evidence_keeps_forty_percent(self, level: ProficiencyLevel, expected: int) -> None:
        assert compute_skill_score(level, Evidence()) == expected

    def test_partial_evidence(self) -> None:
        assert compute_skill_score(ProficiencyLevel.intermediate, Evidence(commit_count=50)) == 25

    def test_accepts_level_string(self) -> None:
        assert compute_skill_score("Advanced", Evidence()) == 30  # type: ignore[arg-type]

    def test_missing_evidence_reads_as_none(self) -> None:
        assert compute_skill_score(ProficiencyLevel.expert, None) == 40
        assert compute_skill_score(ProficiencyLevel.expert) == 40

    def test_accepts_evidence_mapping(self) -> None:
        assert compute_skill_score(ProficiencyLevel.expert, {"commitCount": 100}) == 60
        assert compute_skill_score(ProficiencyLevel.expert, {"lines_of_code": None, "projectNames": None}) == 40

    def test_malformed_evidence_scores_as_empty(self) -> None:
        assert compute_skill_score(ProficiencyLevel.expert, {"commitCount": "lots"}) == 40
        assert compute_skill_score(ProficiencyLevel.expert, ["not", "evidence"]) == 40  # type: ignore[arg-type]

    def test_unknown_level_scores_zero(self) -> None:
        assert compute_skill_score("Guru", Evidence(commit_count=100)) == 0  # type: ignore[arg-type]

    def test_excess_evidence_saturates(self) -> None:
        evidence = Evidence(commit_count=10_000, lines_of_code=10**7, project_names={str(i) for i in range(50)})
        assert compute_skill_score(ProficiencyLevel.advanced, evidence) == 75

    def test_negative_evidence_counts_as_zero(self) -> None:
        assert compute_skill_score(ProficiencyLevel.expert, Evidence(commit_count=-20, lines_of_code=-5)) == 40

    @pytest.mark.parametrize("level", list(ProficiencyLevel))
    def test_bounded_by_level_base(self, level: ProficiencyLevel) -> None:
        base = LEVEL_BASE[level]
        for commits in (0, 10, 60, 100, 400):
            for loc in (0, 999, 5000, 20_000):
                for n_projects in (0, 1, 3, 5, 8):
                    evidence = Evidence(
                        commit_count=commits,
                        lines_of_code=loc,
                        project_names={f"p{i}" for i in range(n_projects)},
                    )
                    score = compute_skill_score(level, evidence)
                    assert math.floor(base * 0.4) <= score <= base

    def test_monotonic_in_evidence(self) -> None:
        previous = 0
        for commits in range(0, 150, 10):
            score = compute_skill_score(ProficiencyLevel.expert, Evidence(commit_count=commits))
            assert score >= previous
            previous = score


class TestAggregateEndorsements:
    def test_empty(self) -> None:
        assert aggregate_endorsements([]) == []

    def test_running_average(self, make_endorsement) -> None:
        result = aggregate_endorsements([make_endorsement("Python", 3), make_endorsement("Python", 5)])
        assert len(result) == 1
        assert result[0].skill_name == "Python"
        assert result[0].count == 2
        assert result[0].running_average_rating == pytest.approx(4)

    def test_last_endorser_type_wins(self, make_endorsement) -> None:
        first = make_endorsement("Go", 4, EndorserType.mentor)
        second = make_endorsement("Go", 2, EndorserType.employer)
        assert aggregate_endorsements([first, second])[0].endorser_type is EndorserType.employer
        assert aggregate_endorsements([second, first])[0].endorser_type is EndorserType.mentor

    def test_order_of_first_appearance(self, make_endorsement) -> None:
        result = aggregate_endorsements(
            [
                make_endorsement("Rust", 4),
                make_endorsement("Go", 5),
                make_endorsement("Rust", 2),
            ]
        )
        assert [(a.skill_name, a.count) for a in result] == [("Rust", 2), ("Go", 1)]
        assert result[0].running_average_rating == pytest.approx(3)

    def test_serialized_field_names(self, make_endorsement) -> None:
        dumped = aggregate_endorsements([make_endorsement("Go", 4)])[0].model_dump(by_alias=True)
        assert dumped == {"skillName": "Go", "endorserType": EndorserType.peer, "runningAverageRating": 4.0, "count": 1}

    def test_ignores_other_credentials(self, portfolio, make_endorsement) -> None:
        result = aggregate_endorsements([portfolio, make_endorsement("SQL", 1)])
        assert [a.skill_name for a in result] == ["SQL"]


class TestBuildSkillGraph:
    def test_empty(self) -> None:
        graph = build_skill_graph([])
        assert graph.skills == [] and graph.connections == [] and graph.endorsements == []

    def test_three_shared_projects_full_strength(self, make_skill) -> None:
        graph = build_skill_graph(
            [make_skill("Python", projects={"a", "b", "c"}), make_skill("SQL", projects={"a", "b", "c", "d"})]
        )
        assert len(graph.connections) == 1
        edge = graph.connections[0]
        assert (edge.from_skill, edge.to_skill, edge.relationship_kind) == ("Python", "SQL", "related")
        assert edge.strength == 1

    def test_no_shared_projects_no_edge(self, make_skill) -> None:
        graph = build_skill_graph([make_skill("Python", projects={"a"}), make_skill("SQL", projects={"b"})])
        assert graph.connections == []

    def test_one_shared_project(self, make_skill) -> None:
        graph = build_skill_graph([make_skill("Python", projects={"a", "x"}), make_skill("SQL", projects={"a"})])
        assert graph.connections[0].strength == pytest.approx(1 / 3)

    def test_strength_is_capped(self, make_skill) -> None:
        shared = {"a", "b", "c", "d", "e"}
        graph = build_skill_graph([make_skill("Python", projects=shared), make_skill("SQL", projects=shared)])
        assert graph.connections[0].strength == 1

    def test_pairs_follow_input_order(self, make_skill) -> None:
        graph = build_skill_graph(
            [
                make_skill("A", projects={"p"}),
                make_skill("B", projects={"q"}),
                make_skill("C", projects={"p", "q"}),
            ]
        )
        assert [(e.from_skill, e.to_skill) for e in graph.connections] == [("A", "C"), ("B", "C")]

    def test_project_names_compared_exactly(self, make_skill) -> None:
        graph = build_skill_graph([make_skill("A", projects={"API"}), make_skill("B", projects={"api"})])
        assert graph.connections == []

    def test_nodes_copy_skill_credentials(self, mixed_credentials) -> None:
        graph = build_skill_graph(mixed_credentials)
        assert [n.skill_name for n in graph.skills] == ["Python", "SQL"]
        assert graph.skills[0].proficiency_level is ProficiencyLevel.expert
        assert graph.skills[0].evidence == mixed_credentials[1].evidence
        assert graph.skills[0].evidence is not mixed_credentials[1].evidence
        assert [(a.skill_name, a.count) for a in graph.endorsements] == [("Python", 2)]
        assert [(e.from_skill, e.to_skill) for e in graph.connections] == [("Python", "SQL")]


class TestComputeTrustScore:
    def test_empty_is_zero(self) -> None:
        assert compute_trust_score([]) == 0

    def test_single_portfolio(self) -> None:
        assert compute_trust_score([PortfolioCredential(subject_id=SUBJECT, reputation_score=100)]) == 100

    def test_single_project_and_endorsement(self, make_endorsement) -> None:
        project = ProjectCredential(subject_id=SUBJECT, contribution_metrics={"commits": 500})
        assert compute_trust_score([project]) == 50
        huge = ProjectCredential(subject_id=SUBJECT, contribution_metrics={"commits": 50_000})
        assert compute_trust_score([huge]) == 100
        assert compute_trust_score([make_endorsement("Go", 4)]) == 80

    def test_weighted_average(self, make_skill) -> None:
        portfolio = PortfolioCredential(subject_id=SUBJECT, reputation_score=80)
        skill = make_skill(
            "Python", ProficiencyLevel.expert, {"a", "b", "c", "d", "e"}, commits=100, loc=10_000
        )
        # (80 * 0.4 + 100 * 0.3) / 0.7
        assert compute_trust_score([portfolio, skill]) == 89

    def test_unscored_kinds_are_skipped(self) -> None:
        badge = CommunityBadgeCredential(subject_id=SUBJECT, community_name="PyLadies")
        assert compute_trust_score([badge]) == 0
        portfolio = PortfolioCredential(subject_id=SUBJECT, reputation_score=60)
        assert compute_trust_score([badge, portfolio, object()]) == 60

    def test_many_credentials_of_one_kind_dominate(self, make_skill) -> None:
        creds = [PortfolioCredential(subject_id=SUBJECT, reputation_score=100)]
        creds += [make_skill(f"s{i}", ProficiencyLevel.beginner) for i in range(5)]
        # (100 * 0.4 + 5 * 10 * 0.3) / (0.4 + 5 * 0.3)
        assert compute_trust_score(creds) == 29
        # per-kind: (100 * 0.4 + 10 * 0.3) / 0.7
        assert compute_trust_score(creds, PerKindAveragePolicy()) == 61

    def test_out_of_range_rating_is_clamped(self, make_endorsement) -> None:
        assert compute_trust_score([make_endorsement("Go", 9)]) == 100
        assert compute_trust_score([make_endorsement("Go", -3)]) == 0

    def test_order_independent(self, mixed_credentials) -> None:
        assert compute_trust_score(mixed_credentials) == compute_trust_score(list(reversed(mixed_credentials)))

    def test_custom_weights(self) -> None:
        portfolio = PortfolioCredential(subject_id=SUBJECT, reputation_score=100)
        project = ProjectCredential(subject_id=SUBJECT, contribution_metrics={"commits": 0})
        policy = WeightedAveragePolicy(weights={"portfolio": 1.0, "project": 0.0})
        assert compute_trust_score([portfolio, project], policy) == 100


class TestPurity:
    def test_repeated_calls_are_identical(self, mixed_credentials) -> None:
        snapshot = [c.model_copy(deep=True) for c in mixed_credentials]
        assert compute_trust_score(mixed_credentials) == compute_trust_score(mixed_credentials)
        assert build_skill_graph(mixed_credentials) == build_skill_graph(mixed_credentials)
        assert aggregate_endorsements(mixed_credentials) == aggregate_endorsements(mixed_credentials)
        first = mixed_credentials[1]
        assert compute_skill_score(first.proficiency_level, first.evidence) == compute_skill_score(
            first.proficiency_level, first.evidence
        )
        assert mixed_credentials == snapshot


class TestHelpers:
    def test_credentials_of_kind(self, mixed_credentials) -> None:
        assert len(credentials_of_kind(mixed_credentials, "skill")) == 2
        assert len(credentials_of_kind(mixed_credentials, "all")) == len(mixed_credentials)
        assert credentials_of_kind(mixed_credentials, "community_badge")[0].community_name == "PyLadies"
        with pytest.raises(ValueError):
            credentials_of_kind(mixed_credentials, "diploma")

    def test_developer_reputation(self, mixed_credentials) -> None:
        report = developer_reputation(mixed_credentials)
        assert report.trust_score == compute_trust_score(mixed_credentials)
        assert report.skill_graph == build_skill_graph(mixed_credentials)
        assert len(report.credentials) == len(mixed_credentials)
