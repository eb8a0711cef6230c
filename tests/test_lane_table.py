import pytest

from nuance_qc.modules.nuance.lanes import DEFAULT_LANE_TABLE, LaneTable, lane_variant
from nuance_qc.modules.nuance.schemas import CONFLICT_MODES


def test_lane_lookup_matches_by_lowercased_substring() -> None:
    assert DEFAULT_LANE_TABLE.melodrama_threshold("Vertical Drama") == 0.62
    assert DEFAULT_LANE_TABLE.similarity_threshold("feature_film") == 0.60
    assert DEFAULT_LANE_TABLE.similarity_threshold("vertical_drama") == 0.70
    assert DEFAULT_LANE_TABLE.default_conflict_mode("documentary") == "legal_procedural"
    assert DEFAULT_LANE_TABLE.default_caps("feature_film").subtext_scenes_min == 4


def test_match_order_resolves_overlapping_keys() -> None:
    assert DEFAULT_LANE_TABLE.melodrama_threshold("documentary series") == 0.15


@pytest.mark.parametrize("lane", ["documentary", "vertical_drama", "series", "feature_film", "other"])
def test_lane_conflict_modes_are_known(lane: str) -> None:
    assert DEFAULT_LANE_TABLE.default_conflict_mode(lane) in CONFLICT_MODES


@pytest.mark.parametrize("lane", ["", None, "radio play", "podcast"])
def test_unknown_lanes_fall_back_to_default_policy(lane) -> None:
    assert DEFAULT_LANE_TABLE.melodrama_threshold(lane) == 0.35
    assert DEFAULT_LANE_TABLE.similarity_threshold(lane) == 0.70
    assert DEFAULT_LANE_TABLE.default_conflict_mode(lane) == "moral_trap"
    assert DEFAULT_LANE_TABLE.default_caps(lane).twist_cap == 1


def test_from_mapping_builds_custom_table() -> None:
    caps = {
        "drama_budget": 1,
        "twist_cap": 0,
        "new_character_cap": 3,
        "plot_thread_cap": 2,
        "faction_cap": 1,
        "subtext_scenes_min": 1,
        "quiet_beats_min": 1,
        "stakes_late_threshold": 0.9,
    }
    table = LaneTable.from_mapping(
        {"Stage": {"melodrama_threshold": 0.2, "similarity_threshold": 0.5, "conflict_mode": "workplace_power", "caps": caps}},
        match_order=["missing", "stage"],
    )

    assert table.melodrama_threshold("stage play") == 0.2
    assert table.default_conflict_mode("STAGE") == "workplace_power"
    assert table.default_caps("stage").stakes_scale_early is True
    assert table.melodrama_threshold("vertical") == 0.35


def test_lane_variant_literals() -> None:
    assert lane_variant("vertical_drama") == "vertical"
    assert lane_variant("Feature Film") == "feature"
    assert lane_variant("series") == "default"
    assert lane_variant(None) == "default"
