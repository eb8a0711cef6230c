from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Literal, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

StoryEngine = Literal[
    "pressure_cooker",
    "two_hander",
    "slow_burn_investigation",
    "social_realism",
    "moral_trap",
    "character_spiral",
    "rashomon",
    "anti_plot",
]
CausalGrammar = Literal[
    "accumulation",
    "erosion",
    "exchange",
    "mirror",
    "constraint",
    "misalignment",
    "contagion",
    "revelation_without_facts",
]
ConflictMode = Literal[
    "status_reputation",
    "family_obligation",
    "moral_trap",
    "legal_procedural",
    "workplace_power",
    "romantic_entanglement",
    "resource_scarcity",
    "identity_secret",
]
StakesType = Literal["personal", "social", "systemic", "global"]
TwistCountBucket = Literal["0", "1", "2+"]
AntagonistType = Literal["person", "self", "system", "relationship"]
EndingType = Literal["reconciliation", "acceptance", "escape", "justice", "tragedy", "ambiguous"]
IncitingIncidentCategory = Literal["loss", "offer", "mistake", "arrival", "accusation", "discovery"]
OutcomeKind = Literal["passed", "repaired_then_passed", "repaired_still_failed", "repair_unavailable"]

STORY_ENGINES: tuple[str, ...] = get_args(StoryEngine)
CAUSAL_GRAMMARS: tuple[str, ...] = get_args(CausalGrammar)
CONFLICT_MODES: tuple[str, ...] = get_args(ConflictMode)

MAX_SETTING_TAGS = 5
NEUTRAL_RESTRAINT = 50.0


class GateFailure(str, Enum):
    MELODRAMA = "MELODRAMA"
    OVERCOMPLEXITY = "OVERCOMPLEXITY"
    TEMPLATE_SIMILARITY = "TEMPLATE_SIMILARITY"
    STAKES_TOO_BIG_TOO_EARLY = "STAKES_TOO_BIG_TOO_EARLY"
    TWIST_OVERUSE = "TWIST_OVERUSE"
    SUBTEXT_MISSING = "SUBTEXT_MISSING"
    QUIET_BEATS_MISSING = "QUIET_BEATS_MISSING"
    MEANING_SHIFT_MISSING = "MEANING_SHIFT_MISSING"


# Declaration order is the evaluation and reporting order.
FAILURE_ORDER: tuple[GateFailure, ...] = tuple(GateFailure)


def finite_or(value: object, default: float) -> float:
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return float(default)
    if not math.isfinite(number):
        return float(default)
    return number


def clamp_unit(value: object, default: float = 0.0) -> float:
    return max(0.0, min(1.0, finite_or(value, default)))


def clamp_restraint(value: object) -> float:
    return max(0.0, min(100.0, finite_or(value, NEUTRAL_RESTRAINT)))


def ordered_failures(failures) -> tuple[GateFailure, ...]:
    """Normalize any iterable of failure names/members into table order, deduplicated."""
    wanted: set[GateFailure] = set()
    for item in failures or ():
        if isinstance(item, GateFailure):
            wanted.add(item)
            continue
        key = str(item or "").strip().upper()
        if key in GateFailure.__members__:
            wanted.add(GateFailure[key])
    return tuple(failure for failure in FAILURE_ORDER if failure in wanted)


class NarrativeMetrics(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    absolute_words_rate: float = Field(default=0.0, ge=0)
    twist_keyword_rate: float = Field(default=0.0, ge=0)
    conspiracy_markers: int = Field(default=0, ge=0)
    shock_events_early: int = Field(default=0, ge=0)
    long_speech_count: int = Field(default=0, ge=0)
    named_factions: int = Field(default=0, ge=0)
    plot_thread_count: int = Field(default=0, ge=0)
    new_character_density: float = Field(default=0.0, ge=0)
    subtext_scene_count: int = Field(default=0, ge=0)
    quiet_beats_count: int = Field(default=0, ge=0)
    meaning_shift_count: int = Field(default=0, ge=0)
    cost_of_action_markers: int = Field(default=0, ge=0)
    antagonist_legitimacy: bool = False

    @classmethod
    def zero(cls) -> NarrativeMetrics:
        return cls()


class Scores(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    melodrama_score: float = Field(default=0.0, ge=0, le=1)
    nuance_score: float = Field(default=0.0, ge=0, le=1)


class Caps(BaseModel):
    """Lane budgets and minimums; the single source of truth for the gate's per-lane limits."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    drama_budget: int = Field(ge=0)
    twist_cap: int = Field(ge=0)
    new_character_cap: float = Field(ge=0)
    plot_thread_cap: int = Field(ge=0)
    faction_cap: int = Field(ge=0)
    subtext_scenes_min: int = Field(ge=0)
    quiet_beats_min: int = Field(ge=0)
    stakes_late_threshold: float = Field(ge=0, le=1)
    stakes_scale_early: bool = True


class GateConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    lane: str = ""
    caps: Caps
    diversify_enabled: bool = True
    similarity_risk: float = 0.0
    restraint: float = NEUTRAL_RESTRAINT

    @field_validator("similarity_risk", mode="before")
    @classmethod
    def _clamp_similarity(cls, value: object) -> float:
        return clamp_unit(value)

    @field_validator("restraint", mode="before")
    @classmethod
    def _clamp_restraint(cls, value: object) -> float:
        return clamp_restraint(value)


class NarrativeFingerprint(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    lane: str
    story_engine: StoryEngine
    causal_grammar: CausalGrammar
    conflict_mode: ConflictMode
    stakes_type: StakesType = "personal"
    twist_count_bucket: TwistCountBucket = "0"
    antagonist_type: AntagonistType = "person"
    ending_type: EndingType = "ambiguous"
    inciting_incident_category: IncitingIncidentCategory = "discovery"
    setting_texture_tags: tuple[str, ...] = Field(default=(), max_length=MAX_SETTING_TAGS)


class DiversificationHints(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    avoid_engines: tuple[StoryEngine, ...] = ()
    avoid_grammars: tuple[CausalGrammar, ...] = ()
    avoid_stakes_types: tuple[StakesType, ...] = ()
    avoid_conflict_modes: tuple[ConflictMode, ...] = ()
    avoid_inciting_categories: tuple[IncitingIncidentCategory, ...] = ()

    def is_empty(self) -> bool:
        return not (
            self.avoid_engines
            or self.avoid_grammars
            or self.avoid_stakes_types
            or self.avoid_conflict_modes
            or self.avoid_inciting_categories
        )


class NuanceProfile(BaseModel):
    """Caller-supplied run parameters for one generation call."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    lane: str
    story_engine: StoryEngine = "pressure_cooker"
    causal_grammar: CausalGrammar = "accumulation"
    conflict_mode: ConflictMode | None = None
    restraint: float = NEUTRAL_RESTRAINT
    diversify: bool = True
    caps: Caps | None = None
    forbidden_tropes: tuple[str, ...] = ()

    @field_validator("restraint", mode="before")
    @classmethod
    def _clamp_restraint(cls, value: object) -> float:
        return clamp_restraint(value)

    @field_validator("forbidden_tropes", mode="before")
    @classmethod
    def _normalize_tropes(cls, value: object) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        out: list[str] = []
        for item in value:  # type: ignore[union-attr]
            trope = str(item or "").strip()
            if trope and trope not in out:
                out.append(trope)
        return tuple(out)


class GateAttempt(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    passed: bool
    failures: tuple[GateFailure, ...] = ()
    metrics: NarrativeMetrics
    scores: Scores
    similarity_risk: float = Field(default=0.0, ge=0, le=1)


class GateSummary(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    passed: bool
    failures: tuple[GateFailure, ...] = ()
    scores: Scores

    @classmethod
    def of(cls, attempt: GateAttempt) -> GateSummary:
        return cls(passed=attempt.passed, failures=attempt.failures, scores=attempt.scores)


class Passed(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["passed"] = "passed"
    attempt0: GateAttempt
    fingerprint: NarrativeFingerprint

    @property
    def final(self) -> GateAttempt:
        return self.attempt0


class RepairedThenPassed(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["repaired_then_passed"] = "repaired_then_passed"
    attempt0: GateAttempt
    attempt1: GateAttempt
    repair_instruction: str
    fingerprint: NarrativeFingerprint

    @property
    def final(self) -> GateAttempt:
        return self.attempt1


class RepairedStillFailed(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["repaired_still_failed"] = "repaired_still_failed"
    attempt0: GateAttempt
    attempt1: GateAttempt
    repair_instruction: str
    fingerprint: NarrativeFingerprint

    @property
    def final(self) -> GateAttempt:
        return self.attempt1


class RepairAttemptUnavailable(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["repair_unavailable"] = "repair_unavailable"
    attempt0: GateAttempt
    repair_instruction: str
    error: str = ""

    @property
    def final(self) -> GateAttempt:
        return self.attempt0


GateOutcome = Annotated[
    Union[Passed, RepairedThenPassed, RepairedStillFailed, RepairAttemptUnavailable],
    Field(discriminator="kind"),
]


class GateResult(BaseModel):
    """Flat record of one orchestrated run, as persisted to run history."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    outcome: OutcomeKind
    attempt0: GateAttempt
    attempt1: GateAttempt | None = None
    final: GateSummary
    repair_instruction: str | None = None

    @classmethod
    def from_outcome(cls, outcome: GateOutcome) -> GateResult:
        attempt1 = getattr(outcome, "attempt1", None)
        return cls(
            outcome=outcome.kind,
            attempt0=outcome.attempt0,
            attempt1=attempt1,
            final=GateSummary.of(outcome.final),
            repair_instruction=getattr(outcome, "repair_instruction", None),
        )
