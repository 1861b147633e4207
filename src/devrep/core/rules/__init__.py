from __future__ import annotations

import os

import tomllib

from devrep.core.services.trust import (
    DEFAULT_POLICY,
    DEFAULT_WEIGHTS,
    PerKindAveragePolicy,
    TrustScorePolicy,
    WeightedAveragePolicy,
)

POLICIES: dict[str, type[WeightedAveragePolicy] | type[PerKindAveragePolicy]] = {
    WeightedAveragePolicy.name: WeightedAveragePolicy,
    PerKindAveragePolicy.name: PerKindAveragePolicy,
}


def load_policy(policy: str = "default") -> TrustScorePolicy:
    """Resolve a trust policy by id or TOML file.

    TOML layout:

        mode = "per-kind"          # or "weighted-average"
        [weights]
        portfolio = 0.5
        skill = 0.3
    """
    if policy in ("default", "auto"):
        env_path = os.getenv("DEVREP_TRUST_POLICY_FILE")
        if env_path and os.path.exists(env_path):
            policy = env_path
        else:
            return DEFAULT_POLICY
    if policy.endswith(".toml"):
        with open(policy, "rb") as f:
            data = tomllib.load(f)
        mode = str(data.get("mode", WeightedAveragePolicy.name))
        if mode not in POLICIES:
            raise ValueError(f"Unknown trust policy mode: {mode}")
        weights = dict(DEFAULT_WEIGHTS)
        weights.update({k: float(v) for k, v in (data.get("weights", {}) or {}).items()})
        return POLICIES[mode](weights=weights)
    if policy in POLICIES:
        return POLICIES[policy]()
    raise ValueError(f"Unknown trust policy: {policy}")


def default_policy() -> TrustScorePolicy:
    return load_policy("default")


__all__ = ["default_policy", "load_policy", "TrustScorePolicy"]
