from __future__ import annotations

from nuance_qc.modules.nuance.schemas import NarrativeMetrics, Scores, finite_or

# (metric field, saturation point, weight); weights sum to 1.0.
MELODRAMA_TERMS: tuple[tuple[str, float, float], ...] = (
    ("absolute_words_rate", 10.0, 0.20),
    ("twist_keyword_rate", 8.0, 0.20),
    ("conspiracy_markers", 5.0, 0.15),
    ("shock_events_early", 3.0, 0.20),
    ("long_speech_count", 4.0, 0.10),
    ("named_factions", 8.0, 0.15),
)
NUANCE_TERMS: tuple[tuple[str, float, float], ...] = (
    ("subtext_scene_count", 3.0, 0.25),
    ("quiet_beats_count", 2.0, 0.20),
    ("meaning_shift_count", 1.0, 0.20),
    ("cost_of_action_markers", 2.0, 0.10),
)
_LEGITIMACY_WEIGHT = 0.15
_RESTRAINT_WEIGHT = 0.10
_RESTRAINT_SATURATION = 10.0


def _non_negative(value: object) -> float:
    return max(0.0, finite_or(value, 0.0))


def _saturate(value: object, threshold: float) -> float:
    return min(1.0, _non_negative(value) / threshold)


def _clamp(score: float) -> float:
    return min(1.0, max(0.0, score))


def melodrama_score(metrics: NarrativeMetrics) -> float:
    total = 0.0
    for field, threshold, weight in MELODRAMA_TERMS:
        total += _saturate(getattr(metrics, field), threshold) * weight
    return _clamp(total)


def nuance_score(metrics: NarrativeMetrics) -> float:
    total = 0.0
    for field, threshold, weight in NUANCE_TERMS:
        total += _saturate(getattr(metrics, field), threshold) * weight
    if metrics.antagonist_legitimacy:
        total += _LEGITIMACY_WEIGHT
    # Inverse term: rewards low twist/conspiracy density.
    noise = _non_negative(metrics.twist_keyword_rate) + _non_negative(metrics.conspiracy_markers)
    total += (1.0 - min(1.0, noise / _RESTRAINT_SATURATION)) * _RESTRAINT_WEIGHT
    return _clamp(total)


def score(metrics: NarrativeMetrics) -> Scores:
    return Scores(melodrama_score=melodrama_score(metrics), nuance_score=nuance_score(metrics))
