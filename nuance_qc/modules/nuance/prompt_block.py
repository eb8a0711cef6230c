from __future__ import annotations

from nuance_qc.modules.nuance.lanes import LaneConfig, get_lane_table
from nuance_qc.modules.nuance.schemas import Caps, DiversificationHints, NuanceProfile

ENGINE_DESCRIPTIONS: dict[str, str] = {
    "pressure_cooker": "Characters trapped in escalating constraints with diminishing options.",
    "two_hander": "Two central characters in an evolving power dynamic.",
    "slow_burn_investigation": "Gradual revelation through methodical inquiry and observation.",
    "social_realism": "Grounded in everyday reality, institutional friction, economic pressure.",
    "moral_trap": "Protagonist faces an impossible choice with legitimate arguments on all sides.",
    "character_spiral": "Internal deterioration or transformation driven by a core flaw.",
    "rashomon": "Multiple perspectives revealing contradictory truths.",
    "anti_plot": "Deliberately subverts narrative expectations; meaning emerges from pattern, not arc.",
}

GRAMMAR_DESCRIPTIONS: dict[str, str] = {
    "accumulation": "Small pressures compound until a threshold breaks.",
    "erosion": "Something valued is gradually worn away.",
    "exchange": "Every gain requires a specific loss.",
    "mirror": "Characters in parallel situations make different choices.",
    "constraint": "External systems limit what characters can do.",
    "misalignment": "Characters want compatible things but can't coordinate.",
    "contagion": "One person's choice cascades through a network.",
    "revelation_without_facts": "Understanding shifts without new information.",
}


def _restraint_guidance(restraint: float) -> str:
    if restraint >= 70:
        return "- Prefer understatement, implication, behavioral tells over explicit confrontation."
    if restraint >= 40:
        return "- Balance direct conflict with subtext and restraint."
    return "- Allow bold dramatic choices but ground them in character logic."


def _humanize(value: str) -> str:
    return value.replace("_", " ")


def _diversify_lines(hints: DiversificationHints) -> list[str]:
    groups = (
        ("story engines", hints.avoid_engines),
        ("causal grammars", hints.avoid_grammars),
        ("stakes types", hints.avoid_stakes_types),
        ("conflict modes", hints.avoid_conflict_modes),
        ("inciting incidents", hints.avoid_inciting_categories),
    )
    lines = ["", "### Diversify", "Recent work in this lane leans on the following; choose something else:"]
    for label, values in groups:
        if values:
            lines.append(f"- Avoid {label}: {', '.join(_humanize(v) for v in values)}")
    return lines


def build_nuance_prompt_block(
    profile: NuanceProfile,
    *,
    caps: Caps | None = None,
    hints: DiversificationHints | None = None,
    lanes: LaneConfig | None = None,
) -> str:
    """Render the constraint block that is prepended to an upstream generation prompt."""
    lane_config = lanes or get_lane_table()
    budget = caps or profile.caps or lane_config.default_caps(profile.lane)
    restraint = int(round(profile.restraint))

    lines = [
        "## NUANCE CONSTRAINTS (MANDATORY)",
        "",
        f"### Story Engine: {profile.story_engine}",
        ENGINE_DESCRIPTIONS.get(profile.story_engine, ""),
        "",
        f"### Causal Grammar: {profile.causal_grammar}",
        GRAMMAR_DESCRIPTIONS.get(profile.causal_grammar, ""),
        "",
        "### Drama Budget",
        f"- Maximum {budget.drama_budget} major escalations allowed.",
        f"- Maximum {max(1, budget.twist_cap)} big reveal unless explicitly stated.",
        f"- Maximum {int(budget.new_character_cap)} core characters.",
        f"- Maximum {budget.plot_thread_cap} major plot threads.",
        f"- Stakes must remain personal/relational until the final {int(round((1 - budget.stakes_late_threshold) * 100))}%.",
        "",
        f"### Restraint Level: {restraint}/100",
        _restraint_guidance(profile.restraint),
        "",
        "### Required Elements",
        f"- At least {budget.subtext_scenes_min} SUBTEXT SCENES: for each, specify what each character wants, "
        "what they won't say, what they say instead, their tactic, and the tell.",
        f"- At least {budget.quiet_beats_min} QUIET BEATS WITH TEETH: tension present but unexpressed, "
        "character revealed through behavior.",
        "- At least 1 MEANING SHIFT per act: reinterpretation of existing information, no new facts needed.",
        "- Opposition must be LEGITIMATE: values collision, systemic constraint, or reasonable disagreement, "
        "not an evil mastermind.",
        "",
        "### Melodrama Translator",
        "Convert any of these patterns to their adult equivalents:",
        "- Screaming confession -> withheld correction / loaded silence with consequence",
        "- Physical threat -> resource withdrawal / contract clause / social leverage",
        "- Villain monologue -> polite email / policy / bureaucratic language",
        "- Sudden violence -> reputational, financial, or procedural consequence",
    ]

    if profile.forbidden_tropes:
        lines.extend(["", "### Forbidden Tropes"])
        lines.extend(f"- Do NOT use: {_humanize(trope)}" for trope in profile.forbidden_tropes)

    if profile.diversify and hints is not None and not hints.is_empty():
        lines.extend(_diversify_lines(hints))

    return "\n".join(lines)
