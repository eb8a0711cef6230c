from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from nuance_qc.modules.nuance.lanes import lane_variant
from nuance_qc.modules.nuance.schemas import DiversificationHints, NarrativeFingerprint

_HINT_SHARE = 0.4
_VERTICAL_HINT_SHARE = 0.3

_WEIGHTED_FIELDS: dict[str, tuple[tuple[str, int], ...]] = {
    "vertical": (
        ("conflict_mode", 3),
        ("inciting_incident_category", 3),
        ("story_engine", 1),
        ("causal_grammar", 1),
        ("stakes_type", 1),
        ("antagonist_type", 1),
        ("ending_type", 1),
    ),
    "feature": (
        ("story_engine", 3),
        ("causal_grammar", 3),
        ("conflict_mode", 1),
        ("inciting_incident_category", 1),
        ("stakes_type", 1),
        ("antagonist_type", 1),
        ("ending_type", 1),
    ),
    "default": (
        ("story_engine", 1),
        ("causal_grammar", 1),
        ("conflict_mode", 1),
        ("stakes_type", 1),
        ("twist_count_bucket", 1),
        ("antagonist_type", 1),
        ("ending_type", 1),
        ("inciting_incident_category", 1),
    ),
}


def weighted_fields(lane: str | None) -> tuple[tuple[str, int], ...]:
    return _WEIGHTED_FIELDS[lane_variant(lane)]


def similarity_risk(
    current: NarrativeFingerprint,
    recent: Sequence[NarrativeFingerprint],
    lane: str | None = None,
) -> float:
    """Average weighted field overlap between ``current`` and each prior fingerprint."""
    if not recent:
        return 0.0

    fields = weighted_fields(lane or current.lane)
    total_weight = sum(weight for _, weight in fields)
    overlap = 0.0
    for prior in recent:
        matched = sum(weight for name, weight in fields if getattr(current, name) == getattr(prior, name))
        overlap += matched / total_weight
    return min(1.0, overlap / len(recent))


def _overused(values: list[str], threshold: float) -> tuple[str, ...]:
    counts = Counter(values)
    return tuple(value for value, count in counts.items() if count >= threshold)


def diversification_hints(
    recent: Sequence[NarrativeFingerprint],
    lane: str | None = None,
) -> DiversificationHints:
    if not recent:
        return DiversificationHints()

    window = len(recent)
    threshold = window * _HINT_SHARE
    focused_threshold = window * _VERTICAL_HINT_SHARE if lane_variant(lane) == "vertical" else threshold

    return DiversificationHints(
        avoid_engines=_overused([fp.story_engine for fp in recent], threshold),
        avoid_grammars=_overused([fp.causal_grammar for fp in recent], threshold),
        avoid_stakes_types=_overused([fp.stakes_type for fp in recent], threshold),
        avoid_conflict_modes=_overused([fp.conflict_mode for fp in recent], focused_threshold),
        avoid_inciting_categories=_overused([fp.inciting_incident_category for fp in recent], focused_threshold),
    )
