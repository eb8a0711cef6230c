import asyncio
from collections import deque
from collections.abc import Iterable

from nuance_qc.modules.llm.base import TextGenerator
from nuance_qc.modules.llm.errors import GeneratorUnavailableError


class FakeGenerator(TextGenerator):
    """Deterministic generator for local runs and tests.

    Scripted responses are returned in order; once exhausted the prior text is
    echoed back unchanged.
    """

    name = "fake"

    def __init__(self, responses: Iterable[str] | None = None, *, delay_s: float = 0.0):
        self._responses: deque[str] = deque(responses or ())
        self.delay_s = float(delay_s)
        self.fail_generate = False
        self.generate_calls = 0
        self.last_call: dict | None = None

    async def generate(
        self,
        prompt: str,
        *,
        prior_text: str,
        repair_instruction: str,
        request_id: str,
        timeout_s: float | None = None,
    ) -> str:
        self.generate_calls += 1
        self.last_call = {
            "prompt": prompt,
            "prior_text": prior_text,
            "repair_instruction": repair_instruction,
            "request_id": request_id,
            "timeout_s": timeout_s,
        }
        if self.delay_s > 0:
            await asyncio.sleep(self.delay_s)
        if self.fail_generate:
            raise GeneratorUnavailableError("fake generator configured to fail")
        if self._responses:
            return self._responses.popleft()
        return prior_text
