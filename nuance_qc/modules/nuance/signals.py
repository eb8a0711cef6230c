from __future__ import annotations

import re

from nuance_qc.modules.nuance.schemas import NarrativeMetrics

_EARLY_PORTION_RATIO = 0.2
_LONG_SPEECH_MIN_CHARS = 150
_WORDS_PER_RATE_UNIT = 1000.0

_ABSOLUTE_WORDS_RE = re.compile(
    r"\b(?:always|never|everything|nothing|only hope|impossible|forever|completely|utterly|total(?:ly)?)\b",
    re.IGNORECASE,
)
_TWIST_KEYWORDS_RE = re.compile(
    r"\b(?:reveals?|turns? out|secretly|suddenly|betrayal|double.?cross|shocking|plot twist|unmasked|all along)\b",
    re.IGNORECASE,
)
_CONSPIRACY_MARKERS_RE = re.compile(
    r"\b(?:organization|conspiracy|shadow|syndicate|cabal|secret society|hidden agenda|puppet master"
    r"|pulling the strings)\b",
    re.IGNORECASE,
)
_SHOCK_EVENTS_RE = re.compile(
    r"\b(?:kidnap\w*|murder\w*|explosions?|assassin\w*|bomb(?:s|ed|ing)?|massacres?|hostages?|poison\w*"
    r"|gunshots?|stab(?:s|bed|bing)?)\b",
    re.IGNORECASE,
)
_SUBTEXT_MARKERS_RE = re.compile(
    r"\b(?:subtext|unspoken|withheld|won[’']t say|says? instead|tactic|tell|beneath the surface|underlying)\b",
    re.IGNORECASE,
)
_QUIET_BEAT_MARKERS_RE = re.compile(
    r"\b(?:silence|pauses?|stillness|quiet moments?|breath|contemplat\w*|reflect\w*|stares?|sit with)\b",
    re.IGNORECASE,
)
_MEANING_SHIFT_MARKERS_RE = re.compile(
    r"\b(?:reinterpret\w*|re-?read\w*|new light|different meaning|realiz\w*|understands? now|see differently"
    r"|meaning shift|changes everything we thought)\b",
    re.IGNORECASE,
)
_ANTAGONIST_LEGITIMACY_RE = re.compile(
    r"\b(?:legitimate|valid point|understandable|reasonable|their perspective|from their view|not wrong"
    r"|has a point)\b",
    re.IGNORECASE,
)
_COST_MARKERS_RE = re.compile(
    r"\b(?:costs?|price|consequences?|sacrifices?|trade-?offs?|lose|risks?|penalty|repercussions?|fallout)\b",
    re.IGNORECASE,
)
_FACTION_MARKERS_RE = re.compile(
    r"\b(?:factions?|groups?|alliances?|coalitions?|clans?|family|house|organization|agency|department"
    r"|teams?|side)\b",
    re.IGNORECASE,
)
_THREAD_MARKERS_RE = re.compile(
    r"\b(?:meanwhile|subplots?|threads?|strands?|parallel|b-story|c-story|side plots?)\b",
    re.IGNORECASE,
)
_CHARACTER_INTRO_RE = re.compile(
    r"\b(?:introduce|introducing|we meet|enters?|arrives?|new character|first appearance)\b",
    re.IGNORECASE,
)
_QUOTED_SPAN_RE = re.compile(r"\"([^\"]*)\"|“([^”]*)”", re.DOTALL)


def _count(pattern: re.Pattern[str], text: str) -> int:
    return sum(1 for _ in pattern.finditer(text))


def word_count(text: str) -> int:
    return len(str(text or "").split())


def _long_speech_count(text: str) -> int:
    count = 0
    for match in _QUOTED_SPAN_RE.finditer(text):
        inner = match.group(1) if match.group(1) is not None else match.group(2) or ""
        if len(inner) > _LONG_SPEECH_MIN_CHARS:
            count += 1
    return count


def extract_metrics(text: str | None) -> NarrativeMetrics:
    """Scan narrative text for structural and tonal markers.

    Rates are normalized per 1,000 words so metrics stay comparable across text
    lengths. Empty or whitespace-only input yields the all-zero record.
    """
    source = str(text or "")
    words = word_count(source)
    if words == 0:
        return NarrativeMetrics.zero()

    per_thousand = words / _WORDS_PER_RATE_UNIT
    early_portion = source[: int(len(source) * _EARLY_PORTION_RATIO)]

    return NarrativeMetrics(
        absolute_words_rate=_count(_ABSOLUTE_WORDS_RE, source) / per_thousand,
        twist_keyword_rate=_count(_TWIST_KEYWORDS_RE, source) / per_thousand,
        conspiracy_markers=_count(_CONSPIRACY_MARKERS_RE, source),
        shock_events_early=_count(_SHOCK_EVENTS_RE, early_portion),
        long_speech_count=_long_speech_count(source),
        named_factions=_count(_FACTION_MARKERS_RE, source),
        plot_thread_count=_count(_THREAD_MARKERS_RE, source),
        new_character_density=_count(_CHARACTER_INTRO_RE, source) / max(1.0, per_thousand),
        subtext_scene_count=_count(_SUBTEXT_MARKERS_RE, source),
        quiet_beats_count=_count(_QUIET_BEAT_MARKERS_RE, source),
        meaning_shift_count=_count(_MEANING_SHIFT_MARKERS_RE, source),
        cost_of_action_markers=_count(_COST_MARKERS_RE, source),
        antagonist_legitimacy=_ANTAGONIST_LEGITIMACY_RE.search(source) is not None,
    )
