from __future__ import annotations

from collections import defaultdict
from threading import Lock
from typing import Protocol

from sqlalchemy import select

from nuance_qc.db import session as db_session
from nuance_qc.db.models import GateRunRecord, NarrativeFingerprintRecord
from nuance_qc.modules.nuance.schemas import GateResult, NarrativeFingerprint


def _history_key(project_id: str, lane: str) -> tuple[str, str]:
    return str(project_id), str(lane or "").strip().lower()


class HistoryStore(Protocol):
    """Append-only fingerprint log and run record sink keyed by (project, lane)."""

    def recent(self, project_id: str, lane: str, limit: int) -> list[NarrativeFingerprint]: ...

    def append(self, project_id: str, lane: str, fingerprint: NarrativeFingerprint) -> None: ...

    def record_result(self, project_id: str, lane: str, result: GateResult) -> None: ...


class InMemoryHistoryStore:
    def __init__(self) -> None:
        self._lock = Lock()
        self._fingerprints: dict[tuple[str, str], list[NarrativeFingerprint]] = defaultdict(list)
        self._results: dict[tuple[str, str], list[GateResult]] = defaultdict(list)

    def recent(self, project_id: str, lane: str, limit: int) -> list[NarrativeFingerprint]:
        if limit <= 0:
            return []
        with self._lock:
            return list(self._fingerprints.get(_history_key(project_id, lane), ())[-limit:])

    def append(self, project_id: str, lane: str, fingerprint: NarrativeFingerprint) -> None:
        with self._lock:
            self._fingerprints[_history_key(project_id, lane)].append(fingerprint)

    def record_result(self, project_id: str, lane: str, result: GateResult) -> None:
        with self._lock:
            self._results[_history_key(project_id, lane)].append(result)

    def results(self, project_id: str, lane: str) -> list[GateResult]:
        with self._lock:
            return list(self._results.get(_history_key(project_id, lane), ()))


class SqlHistoryStore:
    """SQLAlchemy-backed store; each call runs in its own short-lived session."""

    def recent(self, project_id: str, lane: str, limit: int) -> list[NarrativeFingerprint]:
        if limit <= 0:
            return []
        project_key, lane_key = _history_key(project_id, lane)
        stmt = (
            select(NarrativeFingerprintRecord)
            .where(
                NarrativeFingerprintRecord.project_id == project_key,
                NarrativeFingerprintRecord.lane == lane_key,
            )
            .order_by(NarrativeFingerprintRecord.id.desc())
            .limit(limit)
        )
        with db_session.session_scope() as db:
            payloads = [row.fingerprint for row in db.execute(stmt).scalars().all()]
        # Newest-first from the query; callers expect append order.
        return [NarrativeFingerprint.model_validate(payload) for payload in reversed(payloads)]

    def append(self, project_id: str, lane: str, fingerprint: NarrativeFingerprint) -> None:
        project_key, lane_key = _history_key(project_id, lane)
        with db_session.session_scope() as db:
            db.add(
                NarrativeFingerprintRecord(
                    project_id=project_key,
                    lane=lane_key,
                    fingerprint=fingerprint.model_dump(mode="json"),
                )
            )

    def record_result(self, project_id: str, lane: str, result: GateResult) -> None:
        project_key, lane_key = _history_key(project_id, lane)
        with db_session.session_scope() as db:
            db.add(
                GateRunRecord(
                    project_id=project_key,
                    lane=lane_key,
                    outcome=result.outcome,
                    passed=result.final.passed,
                    result=result.model_dump(mode="json"),
                )
            )

    def results(self, project_id: str, lane: str) -> list[GateResult]:
        project_key, lane_key = _history_key(project_id, lane)
        stmt = (
            select(GateRunRecord)
            .where(GateRunRecord.project_id == project_key, GateRunRecord.lane == lane_key)
            .order_by(GateRunRecord.created_at.asc())
        )
        with db_session.session_scope() as db:
            payloads = [row.result for row in db.execute(stmt).scalars().all()]
        return [GateResult.model_validate(payload) for payload in payloads]
