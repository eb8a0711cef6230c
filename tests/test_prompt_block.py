from nuance_qc.modules.nuance.prompt_block import ENGINE_DESCRIPTIONS, GRAMMAR_DESCRIPTIONS, build_nuance_prompt_block
from nuance_qc.modules.nuance.schemas import CAUSAL_GRAMMARS, STORY_ENGINES, DiversificationHints, NuanceProfile


def test_every_engine_and_grammar_is_described() -> None:
    assert set(ENGINE_DESCRIPTIONS) == set(STORY_ENGINES)
    assert set(GRAMMAR_DESCRIPTIONS) == set(CAUSAL_GRAMMARS)


def test_block_describes_engine_and_grammar() -> None:
    block = build_nuance_prompt_block(NuanceProfile(lane="series", story_engine="rashomon", causal_grammar="exchange"))
    assert block.startswith("## NUANCE CONSTRAINTS (MANDATORY)")
    assert "### Story Engine: rashomon" in block
    assert "Multiple perspectives revealing contradictory truths." in block
    assert "Every gain requires a specific loss." in block


def test_drama_budget_comes_from_lane_caps() -> None:
    block = build_nuance_prompt_block(NuanceProfile(lane="vertical_drama"))
    assert "- Maximum 3 major escalations allowed." in block
    assert "until the final 25%." in block
    assert "At least 2 SUBTEXT SCENES" in block


def test_restraint_guidance_bands() -> None:
    high = build_nuance_prompt_block(NuanceProfile(lane="series", restraint=70))
    mid = build_nuance_prompt_block(NuanceProfile(lane="series", restraint=40))
    low = build_nuance_prompt_block(NuanceProfile(lane="series", restraint=39))
    assert "Prefer understatement" in high
    assert "### Restraint Level: 70/100" in high
    assert "Balance direct conflict" in mid
    assert "Allow bold dramatic choices" in low


def test_forbidden_tropes_listed() -> None:
    profile = NuanceProfile(lane="series", forbidden_tropes=["secret_organization", " ", "secret_organization"])
    block = build_nuance_prompt_block(profile)
    assert block.count("- Do NOT use: secret organization") == 1


def test_diversify_section_only_with_hints() -> None:
    hints = DiversificationHints(avoid_conflict_modes=("status_reputation",), avoid_engines=("two_hander",))
    profile = NuanceProfile(lane="vertical_drama")

    block = build_nuance_prompt_block(profile, hints=hints)
    assert "### Diversify" in block
    assert "- Avoid conflict modes: status reputation" in block
    assert "- Avoid story engines: two hander" in block

    assert "### Diversify" not in build_nuance_prompt_block(profile)
    assert "### Diversify" not in build_nuance_prompt_block(profile, hints=DiversificationHints())
    off = NuanceProfile(lane="vertical_drama", diversify=False)
    assert "### Diversify" not in build_nuance_prompt_block(off, hints=hints)
