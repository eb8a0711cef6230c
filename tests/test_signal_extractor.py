from nuance_qc.modules.nuance.schemas import NarrativeMetrics
from nuance_qc.modules.nuance.signals import extract_metrics, word_count


def test_empty_and_whitespace_text_yield_zero_metrics() -> None:
    assert extract_metrics("") == NarrativeMetrics.zero()
    assert extract_metrics("   \n\t ") == NarrativeMetrics.zero()
    assert extract_metrics(None) == NarrativeMetrics.zero()


def test_detects_melodrama_signals() -> None:
    text = (
        "A kidnapping. A murder. An explosion rocks the compound. "
        "He always knew this was everything. She never trusted anyone. "
        "Suddenly he reveals the betrayal. It turns out the secret organization was behind it all along. "
        "Meanwhile the rest of the story continues with various plot developments and character moments "
        "that fill out the narrative and provide enough length for the early-portion detection to work correctly."
    )
    metrics = extract_metrics(text)

    assert metrics.absolute_words_rate > 0
    assert metrics.twist_keyword_rate > 0
    assert metrics.conspiracy_markers > 0
    assert metrics.shock_events_early == 3
    assert metrics.plot_thread_count == 1


def test_detects_nuance_signals() -> None:
    text = (
        "The subtext beneath the surface reveals what he won't say. "
        "A quiet moment of stillness, a pause, contemplation. "
        "She reinterprets everything in a new light. "
        "From their perspective, it's a valid point. The cost of this sacrifice weighs heavy."
    )
    metrics = extract_metrics(text)

    assert metrics.subtext_scene_count == 3
    assert metrics.quiet_beats_count == 4
    assert metrics.meaning_shift_count == 2
    assert metrics.cost_of_action_markers == 2
    assert metrics.antagonist_legitimacy is True


def test_rates_are_per_thousand_words() -> None:
    text = " ".join(["word"] * 498) + " suddenly suddenly"
    assert word_count(text) == 500

    metrics = extract_metrics(text)

    assert metrics.twist_keyword_rate == 4.0


def test_new_character_density_floors_denominator_for_short_text() -> None:
    metrics = extract_metrics("We meet Ana. Then Bo enters.")
    assert metrics.new_character_density == 2.0


def test_early_shock_events_only_scan_first_fifth_of_characters() -> None:
    text = "The murder. " + "calm " * 100 + "explosion."
    metrics = extract_metrics(text)
    assert metrics.shock_events_early == 1


def test_long_speech_counts_quoted_spans_over_150_chars() -> None:
    long_inner = "a" * 151
    text = f'"{long_inner}" and “{long_inner}” but "{"b" * 150}" and \'{long_inner}\''
    metrics = extract_metrics(text)
    assert metrics.long_speech_count == 2


def test_patterns_are_word_bounded_and_match_inflections() -> None:
    bounded = extract_metrics("Tellurium on the sidewalk beside the teammate.")
    assert bounded.subtext_scene_count == 0
    assert bounded.named_factions == 0

    inflected = extract_metrics("Poisoned and stabbed." + " calm" * 50 + " Later she realized and reflected.")
    assert inflected.shock_events_early == 2
    assert inflected.meaning_shift_count == 1
    assert inflected.quiet_beats_count == 1


def test_extraction_is_reproducible() -> None:
    text = "Silence. She won't say it. The price is high; it turns out he knew all along."
    assert extract_metrics(text) == extract_metrics(text)
