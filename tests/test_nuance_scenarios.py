from nuance_qc.modules.nuance.gate import run_gate
from nuance_qc.modules.nuance.lanes import DEFAULT_LANE_TABLE
from nuance_qc.modules.nuance.repair import build_repair_instruction
from nuance_qc.modules.nuance.schemas import GateFailure, NuanceProfile
from nuance_qc.modules.nuance.signals import word_count

_FILLER = "The car moved down the road near the old bridge."

TWIST_HEAVY_TEXT = " ".join(
    ["It turns out she lied."] * 3 + ["He secretly kept the keys."] * 3 + [_FILLER] * 47
)

VERTICAL_NUANCED_TEXT = (
    "Mara keeps the ledger closed. Her silence fills the kitchen. She lets a pause stretch. "
    "Stillness settles over the table. She stares at the window. "
    "What she won't say sits in the unspoken space between them. The tactic is patience. "
    "Later she will realize what the receipt meant."
)


def test_feature_lane_twist_heavy_text_fails() -> None:
    assert word_count(TWIST_HEAVY_TEXT) == 500

    attempt = run_gate(TWIST_HEAVY_TEXT, NuanceProfile(lane="feature", restraint=50))

    assert attempt.passed is False
    assert GateFailure.TWIST_OVERUSE in attempt.failures
    assert GateFailure.SUBTEXT_MISSING in attempt.failures
    assert attempt.metrics.twist_keyword_rate == 12.0


def test_vertical_lane_nuanced_text_passes() -> None:
    attempt = run_gate(VERTICAL_NUANCED_TEXT, NuanceProfile(lane="vertical"))

    assert attempt.metrics.quiet_beats_count == 4
    assert attempt.metrics.subtext_scene_count == 3
    assert attempt.metrics.meaning_shift_count == 1
    assert attempt.metrics.twist_keyword_rate == 0
    assert attempt.metrics.conspiracy_markers == 0
    assert attempt.passed is True
    assert attempt.failures == ()


def test_vertical_melodrama_repair_does_not_leak_feature_text() -> None:
    instruction = build_repair_instruction(
        [GateFailure.MELODRAMA], DEFAULT_LANE_TABLE.default_caps("vertical"), [], "vertical"
    )
    assert "leverage" in instruction
    assert "quiet beats with teeth" not in instruction
