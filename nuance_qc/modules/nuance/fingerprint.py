"""Narrative fingerprinting.

Each categorical axis is an ordered table of (pattern, variant) pairs tested against
the lowercased text; the first match wins and no match yields the axis default.
"""

from __future__ import annotations

import re

from nuance_qc.modules.nuance.lanes import LaneConfig, get_lane_table
from nuance_qc.modules.nuance.schemas import (
    MAX_SETTING_TAGS,
    AntagonistType,
    CausalGrammar,
    ConflictMode,
    EndingType,
    IncitingIncidentCategory,
    NarrativeFingerprint,
    StakesType,
    StoryEngine,
    TwistCountBucket,
)


def _rule(pattern: str) -> re.Pattern[str]:
    return re.compile(rf"\b(?:{pattern})\b")


STAKES_RULES: tuple[tuple[re.Pattern[str], StakesType], ...] = (
    (_rule(r"world|global|humanity|civilization|nation|country|war"), "global"),
    (_rule(r"systemic|institution\w*|policy|government|corporate|structural"), "systemic"),
    (_rule(r"community|social|group|family|neighborhood|town"), "social"),
)
ANTAGONIST_RULES: tuple[tuple[re.Pattern[str], AntagonistType], ...] = (
    (_rule(r"inner|internal|self-?destruct\w*|own worst|addiction|denial"), "self"),
    (_rule(r"system|institution\w*|bureaucra\w*|corporate|government|structural"), "system"),
    (_rule(r"relationship|marriage|partner|family dynamic|toxic"), "relationship"),
)
ENDING_RULES: tuple[tuple[re.Pattern[str], EndingType], ...] = (
    (_rule(r"reconcil\w*|reunit\w*|forgiv\w*|heal(?:s|ed|ing)?|together again"), "reconciliation"),
    (_rule(r"accept(?:s|ed|ance)?|comes? to terms|peace with|letting go"), "acceptance"),
    (_rule(r"escap\w*|flee(?:s|ing)?|leave|run away|freedom"), "escape"),
    (_rule(r"justice|punish\w*|convict\w*|verdict|sentenced?"), "justice"),
    (_rule(r"tragic|tragedy|death|loss|destroy\w*|downfall"), "tragedy"),
)
INCITING_RULES: tuple[tuple[re.Pattern[str], IncitingIncidentCategory], ...] = (
    (_rule(r"loss|death|funeral|fired|bankrupt\w*|divorce\w*"), "loss"),
    (_rule(r"offers?|opportunit(?:y|ies)|invitation|proposal|chance"), "offer"),
    (_rule(r"mistakes?|accident\w*|error|blunder|slip"), "mistake"),
    (_rule(r"arrives?|moves? to|new town|stranger|newcomer"), "arrival"),
    (_rule(r"accus\w*|allegations?|charged|suspect\w*|blame\w*"), "accusation"),
)
# Detection order is the truncation order for the tag list.
SETTING_TAG_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (_rule(r"urban|city|metropolis"), "urban"),
    (_rule(r"rural|countryside|village|farm"), "rural"),
    (_rule(r"office|corporate|workplace"), "workplace"),
    (_rule(r"domestic|home|apartment|house"), "domestic"),
    (_rule(r"hospital|medical|clinic"), "medical"),
    (_rule(r"school|university|campus"), "educational"),
    (_rule(r"court|legal|prison|jail"), "legal"),
)
_TWIST_COUNT_RE = _rule(r"reveals?|turns? out|twist|secretly|all along")


def _first_match(rules, text: str, default):
    for pattern, variant in rules:
        if pattern.search(text):
            return variant
    return default


def _twist_bucket(text: str) -> TwistCountBucket:
    count = sum(1 for _ in _TWIST_COUNT_RE.finditer(text))
    if count == 0:
        return "0"
    if count == 1:
        return "1"
    return "2+"


def setting_texture_tags(text: str) -> tuple[str, ...]:
    lower = str(text or "").lower()
    tags = [tag for pattern, tag in SETTING_TAG_RULES if pattern.search(lower)]
    return tuple(tags[:MAX_SETTING_TAGS])


def fingerprint(
    text: str | None,
    lane: str,
    story_engine: StoryEngine,
    causal_grammar: CausalGrammar,
    conflict_mode: ConflictMode | None = None,
    *,
    lanes: LaneConfig | None = None,
) -> NarrativeFingerprint:
    lower = str(text or "").lower()
    lane_config = lanes or get_lane_table()
    return NarrativeFingerprint(
        lane=str(lane or ""),
        story_engine=story_engine,
        causal_grammar=causal_grammar,
        conflict_mode=conflict_mode or lane_config.default_conflict_mode(lane),
        stakes_type=_first_match(STAKES_RULES, lower, "personal"),
        twist_count_bucket=_twist_bucket(lower),
        antagonist_type=_first_match(ANTAGONIST_RULES, lower, "person"),
        ending_type=_first_match(ENDING_RULES, lower, "ambiguous"),
        inciting_incident_category=_first_match(INCITING_RULES, lower, "discovery"),
        setting_texture_tags=setting_texture_tags(lower),
    )
