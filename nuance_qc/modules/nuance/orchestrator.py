from __future__ import annotations

import asyncio
import logging
import uuid

from nuance_qc.config import settings
from nuance_qc.modules.llm.base import TextGenerator
from nuance_qc.modules.nuance.gate import analyze_attempt
from nuance_qc.modules.nuance.lanes import LaneConfig, get_lane_table
from nuance_qc.modules.nuance.repair import build_repair_instruction
from nuance_qc.modules.nuance.schemas import (
    GateOutcome,
    GateResult,
    NuanceProfile,
    Passed,
    RepairAttemptUnavailable,
    RepairedStillFailed,
    RepairedThenPassed,
)
from nuance_qc.modules.nuance.store import HistoryStore
from nuance_qc.modules.telemetry.service import record_outcome

logger = logging.getLogger(__name__)


class NuanceRunOrchestrator:
    """Runs one gated generation: attempt 0, at most one repair round, then persistence.

    History is read once per run and both attempts are judged against that
    snapshot. Only the fingerprint of the text that is finally kept gets appended,
    and nothing is appended when the repair round produced no text.
    """

    def __init__(
        self,
        generator: TextGenerator,
        store: HistoryStore,
        *,
        lanes: LaneConfig | None = None,
        history_window: int | None = None,
        generator_timeout_s: float | None = None,
    ) -> None:
        self.generator = generator
        self.store = store
        self.lanes = lanes or get_lane_table()
        self.history_window = max(1, int(history_window if history_window is not None else settings.history_window))
        self.generator_timeout_s = float(
            generator_timeout_s if generator_timeout_s is not None else settings.generator_timeout_s
        )

    async def _request_rewrite(self, prompt: str, *, prior_text: str, repair_instruction: str) -> str:
        request_id = uuid.uuid4().hex
        text = await asyncio.wait_for(
            self.generator.generate(
                prompt,
                prior_text=prior_text,
                repair_instruction=repair_instruction,
                request_id=request_id,
                timeout_s=self.generator_timeout_s,
            ),
            timeout=self.generator_timeout_s,
        )
        if not str(text or "").strip():
            raise ValueError("generator returned empty text")
        return str(text)

    def _finish(self, project_id: str, profile: NuanceProfile, outcome: GateOutcome) -> GateOutcome:
        result = GateResult.from_outcome(outcome)
        self.store.record_result(project_id, profile.lane, result)
        record_outcome(result)
        return outcome

    async def run(
        self,
        *,
        project_id: str,
        prompt: str,
        text: str,
        profile: NuanceProfile,
    ) -> GateOutcome:
        history = self.store.recent(project_id, profile.lane, self.history_window)
        first = analyze_attempt(text, profile, history, lanes=self.lanes)

        if first.attempt.passed:
            outcome = Passed(attempt0=first.attempt, fingerprint=first.fingerprint)
            self._finish(project_id, profile, outcome)
            self.store.append(project_id, profile.lane, first.fingerprint)
            return outcome

        caps = profile.caps or self.lanes.default_caps(profile.lane)
        instruction = build_repair_instruction(first.attempt.failures, caps, profile.forbidden_tropes, profile.lane)
        logger.info(
            "repair round project=%s lane=%s failures=%s",
            project_id,
            profile.lane,
            ",".join(f.value for f in first.attempt.failures),
        )

        try:
            repaired_text = await self._request_rewrite(prompt, prior_text=text, repair_instruction=instruction)
        except asyncio.TimeoutError:
            logger.warning(
                "repair generator timed out project=%s lane=%s timeout_s=%s",
                project_id,
                profile.lane,
                self.generator_timeout_s,
            )
            outcome = RepairAttemptUnavailable(
                attempt0=first.attempt,
                repair_instruction=instruction,
                error=f"generator timed out after {self.generator_timeout_s}s",
            )
            return self._finish(project_id, profile, outcome)
        except Exception as exc:  # noqa: BLE001
            logger.warning("repair generator failed project=%s lane=%s error=%s", project_id, profile.lane, exc)
            outcome = RepairAttemptUnavailable(attempt0=first.attempt, repair_instruction=instruction, error=str(exc))
            return self._finish(project_id, profile, outcome)

        second = analyze_attempt(repaired_text, profile, history, lanes=self.lanes)
        outcome_cls = RepairedThenPassed if second.attempt.passed else RepairedStillFailed
        outcome = outcome_cls(
            attempt0=first.attempt,
            attempt1=second.attempt,
            repair_instruction=instruction,
            fingerprint=second.fingerprint,
        )
        logger.info(
            "repair round finished project=%s lane=%s outcome=%s",
            project_id,
            profile.lane,
            outcome.kind,
        )
        self._finish(project_id, profile, outcome)
        self.store.append(project_id, profile.lane, second.fingerprint)
        return outcome

    def run_sync(
        self,
        *,
        project_id: str,
        prompt: str,
        text: str,
        profile: NuanceProfile,
    ) -> GateOutcome:
        return asyncio.run(self.run(project_id=project_id, prompt=prompt, text=text, profile=profile))
