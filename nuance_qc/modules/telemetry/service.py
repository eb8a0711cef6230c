from __future__ import annotations

from collections import Counter
from threading import Lock
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nuance_qc.modules.nuance.schemas import GateResult


class _GateTelemetryStore:
    def __init__(self) -> None:
        self._lock = Lock()
        self.total_runs: int = 0
        self.passed_runs: int = 0
        self.repair_rounds: int = 0
        self.repair_unavailable: int = 0
        self.outcome_distribution: Counter[str] = Counter()
        self.attempt0_failures: Counter[str] = Counter()
        self.final_failures: Counter[str] = Counter()

    def reset(self) -> None:
        with self._lock:
            self.total_runs = 0
            self.passed_runs = 0
            self.repair_rounds = 0
            self.repair_unavailable = 0
            self.outcome_distribution = Counter()
            self.attempt0_failures = Counter()
            self.final_failures = Counter()

    def record(self, result: GateResult) -> None:
        with self._lock:
            self.total_runs += 1
            self.outcome_distribution[result.outcome] += 1
            if result.final.passed:
                self.passed_runs += 1
            if result.attempt1 is not None:
                self.repair_rounds += 1
            if result.outcome == "repair_unavailable":
                self.repair_unavailable += 1
            for failure in result.attempt0.failures:
                self.attempt0_failures[failure.value] += 1
            for failure in result.final.failures:
                self.final_failures[failure.value] += 1

    def summary(self) -> dict:
        with self._lock:
            total = int(self.total_runs)
            repairs = int(self.repair_rounds)
            repaired_passed = int(self.outcome_distribution.get("repaired_then_passed", 0))
            pass_rate = 0.0 if total <= 0 else float(self.passed_runs) / float(total)
            repair_success_rate = 0.0 if repairs <= 0 else float(repaired_passed) / float(repairs)
            return {
                "total_runs": total,
                "passed_runs": int(self.passed_runs),
                "pass_rate": round(pass_rate, 4),
                "repair_rounds": repairs,
                "repair_success_rate": round(repair_success_rate, 4),
                "repair_unavailable": int(self.repair_unavailable),
                "outcome_distribution": dict(self.outcome_distribution),
                "attempt0_failures": dict(self.attempt0_failures),
                "final_failures": dict(self.final_failures),
            }


_gate_telemetry = _GateTelemetryStore()


def reset_gate_telemetry() -> None:
    _gate_telemetry.reset()


def record_outcome(result: GateResult) -> None:
    _gate_telemetry.record(result)


def get_gate_telemetry_summary() -> dict:
    return _gate_telemetry.summary()
