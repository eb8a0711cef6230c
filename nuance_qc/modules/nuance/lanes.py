"""Lane-keyed policy table.

Thresholds, caps and the default conflict mode are looked up by lane key. Keys are
free-form strings ("vertical_drama", "Feature Film", ...) so lookup matches by
lowercased substring in a fixed order; anything unmatched falls back to the default
policy so the gate is never blocked by a missing entry.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field

from nuance_qc.modules.nuance.schemas import Caps, ConflictMode

LaneVariant = Literal["vertical", "feature", "default"]


def lane_variant(lane: str | None) -> LaneVariant:
    key = str(lane or "").strip().lower()
    if "vertical" in key:
        return "vertical"
    if "feature" in key:
        return "feature"
    return "default"


class LaneConfig(Protocol):
    def melodrama_threshold(self, lane: str | None) -> float: ...

    def similarity_threshold(self, lane: str | None) -> float: ...

    def default_conflict_mode(self, lane: str | None) -> ConflictMode: ...

    def default_caps(self, lane: str | None) -> Caps: ...


class LanePolicy(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    melodrama_threshold: float = Field(gt=0, le=1)
    similarity_threshold: float = Field(gt=0, le=1)
    conflict_mode: ConflictMode
    caps: Caps


class LaneTable:
    def __init__(
        self,
        policies: Mapping[str, LanePolicy],
        *,
        default: LanePolicy,
        match_order: Sequence[str] | None = None,
    ) -> None:
        self._policies: dict[str, LanePolicy] = {str(k).strip().lower(): v for k, v in policies.items()}
        order = match_order if match_order is not None else list(policies.keys())
        normalized_order = (str(k).strip().lower() for k in order)
        self._match_order: tuple[str, ...] = tuple(k for k in normalized_order if k in self._policies)
        self._default = default

    @classmethod
    def from_mapping(
        cls,
        raw: Mapping[str, Mapping],
        *,
        default: Mapping | LanePolicy | None = None,
        match_order: Sequence[str] | None = None,
    ) -> LaneTable:
        policies = {str(key): LanePolicy.model_validate(value) for key, value in raw.items()}
        if default is None:
            default_policy = _DEFAULT_POLICY
        elif isinstance(default, LanePolicy):
            default_policy = default
        else:
            default_policy = LanePolicy.model_validate(default)
        return cls(policies, default=default_policy, match_order=match_order)

    def resolve(self, lane: str | None) -> LanePolicy:
        key = str(lane or "").strip().lower()
        if not key:
            return self._default
        for pattern in self._match_order:
            if pattern in key:
                return self._policies[pattern]
        return self._default

    def melodrama_threshold(self, lane: str | None) -> float:
        return self.resolve(lane).melodrama_threshold

    def similarity_threshold(self, lane: str | None) -> float:
        return self.resolve(lane).similarity_threshold

    def default_conflict_mode(self, lane: str | None) -> ConflictMode:
        return self.resolve(lane).conflict_mode

    def default_caps(self, lane: str | None) -> Caps:
        return self.resolve(lane).caps


_DEFAULT_POLICY = LanePolicy(
    melodrama_threshold=0.35,
    similarity_threshold=0.70,
    conflict_mode="moral_trap",
    caps=Caps(
        drama_budget=2,
        twist_cap=1,
        new_character_cap=5,
        plot_thread_cap=3,
        faction_cap=2,
        subtext_scenes_min=3,
        quiet_beats_min=2,
        stakes_late_threshold=0.80,
        stakes_scale_early=True,
    ),
)

DEFAULT_LANE_TABLE = LaneTable(
    {
        "documentary": LanePolicy(
            melodrama_threshold=0.15,
            similarity_threshold=0.70,
            conflict_mode="legal_procedural",
            caps=Caps(
                drama_budget=1,
                twist_cap=0,
                new_character_cap=5,
                plot_thread_cap=3,
                faction_cap=1,
                subtext_scenes_min=2,
                quiet_beats_min=3,
                stakes_late_threshold=0.80,
            ),
        ),
        "vertical": LanePolicy(
            melodrama_threshold=0.62,
            similarity_threshold=0.70,
            conflict_mode="status_reputation",
            caps=Caps(
                drama_budget=3,
                twist_cap=2,
                new_character_cap=6,
                plot_thread_cap=3,
                faction_cap=2,
                subtext_scenes_min=2,
                quiet_beats_min=1,
                stakes_late_threshold=0.75,
            ),
        ),
        "series": LanePolicy(
            melodrama_threshold=0.35,
            similarity_threshold=0.65,
            conflict_mode="family_obligation",
            caps=Caps(
                drama_budget=2,
                twist_cap=1,
                new_character_cap=5,
                plot_thread_cap=3,
                faction_cap=2,
                subtext_scenes_min=3,
                quiet_beats_min=2,
                stakes_late_threshold=0.80,
            ),
        ),
        "feature": LanePolicy(
            melodrama_threshold=0.50,
            similarity_threshold=0.60,
            conflict_mode="moral_trap",
            caps=Caps(
                drama_budget=2,
                twist_cap=1,
                new_character_cap=5,
                plot_thread_cap=3,
                faction_cap=1,
                subtext_scenes_min=4,
                quiet_beats_min=3,
                stakes_late_threshold=0.80,
            ),
        ),
    },
    default=_DEFAULT_POLICY,
    match_order=("documentary", "vertical", "series", "feature"),
)


def get_lane_table() -> LaneConfig:
    return DEFAULT_LANE_TABLE
