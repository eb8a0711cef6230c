from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from nuance_qc.modules.nuance.fingerprint import fingerprint
from nuance_qc.modules.nuance.history import similarity_risk
from nuance_qc.modules.nuance.lanes import LaneConfig, get_lane_table
from nuance_qc.modules.nuance.schemas import (
    NEUTRAL_RESTRAINT,
    GateAttempt,
    GateConfig,
    GateFailure,
    NarrativeFingerprint,
    NarrativeMetrics,
    NuanceProfile,
    Scores,
    clamp_restraint,
    ordered_failures,
)
from nuance_qc.modules.nuance.scoring import score
from nuance_qc.modules.nuance.signals import extract_metrics

logger = logging.getLogger(__name__)

_EARLY_SHOCK_LIMIT = 2
_TWIST_RATE_PER_CAP = 3
_COMPLEXITY_MULTIPLIER = 2
_MEANING_SHIFT_MIN = 1


def melodrama_limit(base_threshold: float, restraint: float) -> float:
    """Restraint 50 is neutral, 100 halves the tolerance, 0 doubles it."""
    return base_threshold * (1 - (clamp_restraint(restraint) - NEUTRAL_RESTRAINT) / 200)


def evaluate(
    metrics: NarrativeMetrics,
    scores: Scores,
    config: GateConfig,
    *,
    lanes: LaneConfig | None = None,
) -> GateAttempt:
    lane_config = lanes or get_lane_table()
    caps = config.caps
    failures: list[GateFailure] = []

    if scores.melodrama_score > melodrama_limit(lane_config.melodrama_threshold(config.lane), config.restraint):
        failures.append(GateFailure.MELODRAMA)
    if (
        metrics.plot_thread_count > _COMPLEXITY_MULTIPLIER * caps.plot_thread_cap
        or metrics.named_factions > _COMPLEXITY_MULTIPLIER * caps.faction_cap
        or metrics.new_character_density > caps.new_character_cap
    ):
        failures.append(GateFailure.OVERCOMPLEXITY)
    if config.diversify_enabled and config.similarity_risk > lane_config.similarity_threshold(config.lane):
        failures.append(GateFailure.TEMPLATE_SIMILARITY)
    if caps.stakes_scale_early and metrics.shock_events_early > _EARLY_SHOCK_LIMIT:
        failures.append(GateFailure.STAKES_TOO_BIG_TOO_EARLY)
    if metrics.twist_keyword_rate > (caps.twist_cap + 1) * _TWIST_RATE_PER_CAP:
        failures.append(GateFailure.TWIST_OVERUSE)
    if metrics.subtext_scene_count < caps.subtext_scenes_min:
        failures.append(GateFailure.SUBTEXT_MISSING)
    if metrics.quiet_beats_count < caps.quiet_beats_min:
        failures.append(GateFailure.QUIET_BEATS_MISSING)
    if metrics.meaning_shift_count < _MEANING_SHIFT_MIN:
        failures.append(GateFailure.MEANING_SHIFT_MISSING)

    ordered = ordered_failures(failures)
    return GateAttempt(
        passed=not ordered,
        failures=ordered,
        metrics=metrics,
        scores=scores,
        similarity_risk=config.similarity_risk,
    )


def build_gate_config(
    profile: NuanceProfile,
    risk: float = 0.0,
    *,
    lanes: LaneConfig | None = None,
) -> GateConfig:
    lane_config = lanes or get_lane_table()
    return GateConfig(
        lane=profile.lane,
        caps=profile.caps or lane_config.default_caps(profile.lane),
        diversify_enabled=profile.diversify,
        similarity_risk=risk,
        restraint=profile.restraint,
    )


@dataclass(frozen=True)
class AttemptAnalysis:
    attempt: GateAttempt
    fingerprint: NarrativeFingerprint


def analyze_attempt(
    text: str | None,
    profile: NuanceProfile,
    history: Sequence[NarrativeFingerprint] = (),
    *,
    lanes: LaneConfig | None = None,
) -> AttemptAnalysis:
    lane_config = lanes or get_lane_table()
    metrics = extract_metrics(text)
    scores = score(metrics)
    current = fingerprint(
        text,
        profile.lane,
        profile.story_engine,
        profile.causal_grammar,
        profile.conflict_mode,
        lanes=lane_config,
    )
    risk = similarity_risk(current, history, profile.lane)
    config = build_gate_config(profile, risk, lanes=lane_config)
    attempt = evaluate(metrics, scores, config, lanes=lane_config)
    logger.debug(
        "gate verdict lane=%s passed=%s failures=%s melodrama=%.3f nuance=%.3f similarity=%.3f",
        profile.lane,
        attempt.passed,
        ",".join(f.value for f in attempt.failures) or "-",
        scores.melodrama_score,
        scores.nuance_score,
        risk,
    )
    return AttemptAnalysis(attempt=attempt, fingerprint=current)


def run_gate(
    text: str | None,
    profile: NuanceProfile,
    history: Sequence[NarrativeFingerprint] = (),
    *,
    lanes: LaneConfig | None = None,
) -> GateAttempt:
    return analyze_attempt(text, profile, history, lanes=lanes).attempt
