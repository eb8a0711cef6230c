from nuance_qc.modules.nuance.fingerprint import fingerprint
from nuance_qc.modules.nuance.schemas import GateAttempt, GateResult, GateSummary, NarrativeMetrics, Scores
from nuance_qc.modules.nuance.store import InMemoryHistoryStore, SqlHistoryStore


def _fps(lane: str):
    return [
        fingerprint("The war begins.", lane, "pressure_cooker", "accumulation"),
        fingerprint("A quiet office.", lane, "two_hander", "mirror"),
        fingerprint("She secretly knew all along.", lane, "rashomon", "erosion"),
    ]


def _result() -> GateResult:
    attempt = GateAttempt(passed=True, metrics=NarrativeMetrics.zero(), scores=Scores())
    return GateResult(outcome="passed", attempt0=attempt, final=GateSummary.of(attempt))


def test_sql_store_returns_most_recent_window_in_append_order() -> None:
    store = SqlHistoryStore()
    fps = _fps("vertical_drama")
    for fp in fps:
        store.append("p1", "vertical_drama", fp)

    assert store.recent("p1", "vertical_drama", 2) == fps[1:]
    assert store.recent("p1", "vertical_drama", 10) == fps
    assert store.recent("p1", "vertical_drama", 0) == []


def test_sql_store_keys_by_project_and_normalized_lane() -> None:
    store = SqlHistoryStore()
    fp = _fps("series")[0]
    store.append("p1", "Series", fp)

    assert store.recent("p1", "series", 5) == [fp]
    assert store.recent("p2", "series", 5) == []
    assert store.recent("p1", "feature_film", 5) == []


def test_sql_store_records_results() -> None:
    store = SqlHistoryStore()
    store.record_result("p1", "series", _result())
    results = store.results("p1", "series")
    assert len(results) == 1
    assert results[0].final.passed is True


def test_in_memory_store_matches_sql_semantics() -> None:
    store = InMemoryHistoryStore()
    fps = _fps("feature_film")
    for fp in fps:
        store.append("p1", "Feature_Film", fp)

    assert store.recent("p1", "feature_film", 2) == fps[1:]
    assert store.recent("p1", "feature_film", 0) == []
    store.record_result("p1", "feature_film", _result())
    assert len(store.results("p1", "FEATURE_FILM")) == 1
