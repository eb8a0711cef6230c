from nuance_qc.modules.nuance.fingerprint import fingerprint
from nuance_qc.modules.nuance.gate import analyze_attempt, build_gate_config, evaluate, melodrama_limit, run_gate
from nuance_qc.modules.nuance.history import diversification_hints, similarity_risk
from nuance_qc.modules.nuance.lanes import DEFAULT_LANE_TABLE, LaneConfig, LanePolicy, LaneTable, get_lane_table
from nuance_qc.modules.nuance.orchestrator import NuanceRunOrchestrator
from nuance_qc.modules.nuance.prompt_block import build_nuance_prompt_block
from nuance_qc.modules.nuance.repair import build_repair_instruction
from nuance_qc.modules.nuance.schemas import (
    Caps,
    DiversificationHints,
    GateAttempt,
    GateConfig,
    GateFailure,
    GateOutcome,
    GateResult,
    NarrativeFingerprint,
    NarrativeMetrics,
    NuanceProfile,
    Passed,
    RepairAttemptUnavailable,
    RepairedStillFailed,
    RepairedThenPassed,
    Scores,
)
from nuance_qc.modules.nuance.scoring import melodrama_score, nuance_score, score
from nuance_qc.modules.nuance.signals import extract_metrics
from nuance_qc.modules.nuance.store import HistoryStore, InMemoryHistoryStore, SqlHistoryStore

__all__ = [
    "extract_metrics",
    "melodrama_score",
    "nuance_score",
    "score",
    "fingerprint",
    "similarity_risk",
    "diversification_hints",
    "evaluate",
    "melodrama_limit",
    "build_gate_config",
    "analyze_attempt",
    "run_gate",
    "build_repair_instruction",
    "build_nuance_prompt_block",
    "NuanceRunOrchestrator",
    "LaneConfig",
    "LanePolicy",
    "LaneTable",
    "DEFAULT_LANE_TABLE",
    "get_lane_table",
    "HistoryStore",
    "InMemoryHistoryStore",
    "SqlHistoryStore",
    "Caps",
    "DiversificationHints",
    "GateAttempt",
    "GateConfig",
    "GateFailure",
    "GateOutcome",
    "GateResult",
    "NarrativeFingerprint",
    "NarrativeMetrics",
    "NuanceProfile",
    "Passed",
    "RepairAttemptUnavailable",
    "RepairedStillFailed",
    "RepairedThenPassed",
    "Scores",
]
