from nuance_qc.modules.nuance.lanes import DEFAULT_LANE_TABLE
from nuance_qc.modules.nuance.repair import build_repair_instruction
from nuance_qc.modules.nuance.schemas import GateFailure


def _caps(lane: str | None = None):
    return DEFAULT_LANE_TABLE.default_caps(lane)


def test_vertical_priorities_use_leverage_language() -> None:
    instruction = build_repair_instruction([GateFailure.MELODRAMA], _caps("vertical_drama"), [], "vertical_drama")
    assert "VERTICAL DRAMA REPAIR PRIORITIES" in instruction
    assert "leverage" in instruction
    assert "social friction" in instruction
    assert "quiet beats with teeth" not in instruction
    assert "FEATURE FILM REPAIR PRIORITIES" not in instruction


def test_feature_priorities_lead_with_quiet_beats() -> None:
    instruction = build_repair_instruction(["MELODRAMA"], _caps("feature_film"), [], "feature_film")
    assert "FEATURE FILM REPAIR PRIORITIES" in instruction
    assert "quiet beats with teeth" in instruction
    assert "subtext density" in instruction
    assert "VERTICAL DRAMA REPAIR PRIORITIES" not in instruction


def test_default_lane_has_no_priority_block() -> None:
    instruction = build_repair_instruction(["MELODRAMA"], _caps(), [], "series")
    assert "REPAIR PRIORITIES" not in instruction
    assert "REDUCE MELODRAMA:" in instruction


def test_tropes_replace_underscores() -> None:
    instruction = build_repair_instruction([], _caps(), ["secret_organization", "hidden_bloodline"])
    assert "AVOID TROPES:\n- No secret organization.\n- No hidden bloodline." in instruction


def test_critical_rules_always_close_the_instruction() -> None:
    instruction = build_repair_instruction(["OVERCOMPLEXITY"], _caps(), [])
    assert "REDUCE COMPLEXITY" in instruction
    assert "Do NOT add new plot elements" in instruction
    assert instruction.split("\n\n")[-1].startswith("CRITICAL REPAIR RULES:")
    assert len(instruction.split("\n\n")[-1].splitlines()) == 5


def test_empty_failures_still_emit_critical_rules() -> None:
    instruction = build_repair_instruction([], _caps(), [])
    assert instruction.startswith("CRITICAL REPAIR RULES:")


def test_subtext_minimum_comes_from_caps() -> None:
    instruction = build_repair_instruction(["SUBTEXT_MISSING"], _caps("feature_film"), [], "feature_film")
    assert "at least 4 subtext scenes" in instruction


def test_blocks_follow_table_order_regardless_of_input_order() -> None:
    instruction = build_repair_instruction(
        ["SUBTEXT_MISSING", "TWIST_OVERUSE", "MELODRAMA", "MELODRAMA"],
        _caps(),
        [],
    )
    melodrama = instruction.index("REDUCE MELODRAMA")
    twists = instruction.index("REDUCE TWISTS")
    subtext = instruction.index("ADD SUBTEXT")
    assert melodrama < twists < subtext
    assert instruction.count("REDUCE MELODRAMA") == 1


def test_lane_variant_text_differs_for_stakes_and_twists() -> None:
    failures = ["STAKES_TOO_BIG_TOO_EARLY", "TWIST_OVERUSE"]
    vertical = build_repair_instruction(failures, _caps("vertical_drama"), [], "vertical_drama")
    feature = build_repair_instruction(failures, _caps("feature_film"), [], "feature_film")
    default = build_repair_instruction(failures, _caps(), [], None)
    assert "episode cliffhanger" in vertical
    assert "Keep at most 2 reveals" in vertical
    assert "first act" in feature
    assert "Keep at most 1 major reveal." in default
    assert len({vertical, feature, default}) == 3


def test_instruction_is_deterministic() -> None:
    args = (list(GateFailure), _caps("vertical_drama"), ["evil_twin"], "vertical_drama")
    assert build_repair_instruction(*args) == build_repair_instruction(*args)
