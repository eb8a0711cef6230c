"""Repair directive composition.

The instruction never asks for new material: every directive removes, replaces or
reframes something already on the page. Output is a pure function of its inputs.
"""

from __future__ import annotations

from collections.abc import Iterable

from nuance_qc.modules.nuance.lanes import LaneVariant, lane_variant
from nuance_qc.modules.nuance.schemas import Caps, GateFailure, ordered_failures

_MELODRAMA_LINES: dict[LaneVariant, tuple[str, ...]] = {
    "vertical": (
        "REDUCE MELODRAMA:",
        "- Keep the hook, but turn shouting matches into leverage plays: favors called in, access revoked, secrets held back.",
        "- Replace physical threats with social leverage or public embarrassment.",
        "- Let villains speak in polite ultimatums, not monologues.",
        "- Cut absolute language by half.",
    ),
    "feature": (
        "REDUCE MELODRAMA:",
        "- Convert screaming confessions to withheld corrections and loaded silence.",
        "- Replace physical threats with consequences the audience can watch land over time.",
        "- Replace villain monologues with behavior that shows the opposing value.",
        "- Cut absolute language by half.",
    ),
    "default": (
        "REDUCE MELODRAMA:",
        "- Convert screaming confessions to withheld corrections.",
        "- Replace physical threats with resource withdrawal or social leverage.",
        "- Replace villain monologues with bureaucratic language.",
        "- Cut absolute language by half.",
    ),
}
_STAKES_LINES: dict[LaneVariant, tuple[str, ...]] = {
    "vertical": (
        "REFRAME EARLY STAKES:",
        "- Open on status, money or reputation at risk, not lives.",
        "- Move any violence or life-threatening event out of the opening episodes.",
    ),
    "feature": (
        "REFRAME EARLY STAKES:",
        "- Keep stakes personal in the first act and let them widen only through consequence.",
        "- Remove global or life-threatening stakes from early acts.",
    ),
    "default": (
        "REFRAME EARLY STAKES:",
        "- Keep stakes personal until the final stretch.",
        "- Remove global or life-threatening stakes from early acts.",
    ),
}
_TWIST_LINES: dict[LaneVariant, tuple[str, ...]] = {
    "vertical": (
        "REDUCE TWISTS:",
        "- Keep at most {max_reveals} reveals, each landing on an episode cliffhanger.",
        "- Replace removed twists with a shift in who holds leverage.",
    ),
    "feature": (
        "REDUCE TWISTS:",
        "- Keep at most {max_reveals} major reveal.",
        "- Replace removed twists with character insight the audience already had the pieces for.",
    ),
    "default": (
        "REDUCE TWISTS:",
        "- Keep at most {max_reveals} major reveal.",
        "- Replace removed twists with character insight.",
    ),
}
_PRIORITY_LINES: dict[LaneVariant, tuple[str, ...]] = {
    "vertical": (
        "VERTICAL DRAMA REPAIR PRIORITIES:",
        "- Preserve the hook and the episode cliffhangers.",
        "- Drive conflict through leverage and social friction, not violence.",
        "- Keep reveals tied to status changes between characters.",
    ),
    "feature": (
        "FEATURE FILM REPAIR PRIORITIES:",
        "- Protect quiet beats with teeth first: tension present but unexpressed.",
        "- Raise subtext density before adding any dialogue.",
        "- Let meaning shift through reinterpretation, not new facts.",
    ),
}
_CRITICAL_RULES: tuple[str, ...] = (
    "CRITICAL REPAIR RULES:",
    "- Do NOT add new plot elements, characters or subplots.",
    "- Only remove, replace, or reframe existing material.",
    "- Preserve the story structure and emotional trajectory.",
    "- Opposition must be legitimate, never a cartoonish antagonist.",
)


def _failure_block(failure: GateFailure, caps: Caps, variant: LaneVariant) -> list[str]:
    if failure is GateFailure.MELODRAMA:
        return list(_MELODRAMA_LINES[variant])
    if failure is GateFailure.OVERCOMPLEXITY:
        return [
            "REDUCE COMPLEXITY:",
            f"- Collapse plot threads to at most {caps.plot_thread_cap}.",
            f"- Limit core characters to {int(caps.new_character_cap)}.",
            f"- Keep at most {caps.faction_cap} factions; remove the rest.",
        ]
    if failure is GateFailure.TEMPLATE_SIMILARITY:
        return [
            "BREAK TEMPLATE SIMILARITY:",
            "- Change the inciting incident's category rather than its details.",
            "- Shift the conflict mode away from recent projects in this lane.",
            "- Keep characters and structure; vary how pressure is applied.",
        ]
    if failure is GateFailure.STAKES_TOO_BIG_TOO_EARLY:
        return list(_STAKES_LINES[variant])
    if failure is GateFailure.TWIST_OVERUSE:
        max_reveals = max(1, caps.twist_cap)
        return [line.format(max_reveals=max_reveals) for line in _TWIST_LINES[variant]]
    if failure is GateFailure.SUBTEXT_MISSING:
        return [
            "ADD SUBTEXT:",
            f"- Include at least {caps.subtext_scenes_min} subtext scenes: "
            "what each character wants, won't say, says instead, their tactic and the tell.",
        ]
    if failure is GateFailure.QUIET_BEATS_MISSING:
        return [
            "ADD QUIET BEATS:",
            f"- Include at least {caps.quiet_beats_min} quiet beats with tension carried by behavior, not dialogue.",
        ]
    return [
        "ADD MEANING SHIFTS:",
        "- Include at least 1 moment per act that reinterprets existing information.",
    ]


def build_repair_instruction(
    failures: Iterable[GateFailure | str],
    caps: Caps,
    forbidden_tropes: Iterable[str] = (),
    lane: str | None = None,
) -> str:
    variant = lane_variant(lane)
    blocks: list[list[str]] = [_failure_block(failure, caps, variant) for failure in ordered_failures(failures)]

    tropes = [str(t).strip() for t in forbidden_tropes or () if str(t or "").strip()]
    if tropes:
        blocks.append(["AVOID TROPES:", *(f"- No {t.replace('_', ' ')}." for t in tropes)])

    priorities = _PRIORITY_LINES.get(variant)
    if priorities:
        blocks.append(list(priorities))

    blocks.append(list(_CRITICAL_RULES))
    return "\n\n".join("\n".join(block) for block in blocks)
