import logging
import time

import httpx

from nuance_qc.modules.llm.base import TextGenerator
from nuance_qc.modules.llm.errors import (
    GENERATOR_ERROR_EMPTY_OUTPUT,
    GENERATOR_ERROR_HTTP_STATUS,
    GENERATOR_ERROR_NETWORK,
    GENERATOR_ERROR_TIMEOUT,
    GeneratorUnavailableError,
)
from nuance_qc.modules.llm.prompts import build_repair_prompt

logger = logging.getLogger(__name__)


class ChatCompletionsGenerator(TextGenerator):
    """Rewrites drafts through an OpenAI-compatible ``/chat/completions`` endpoint."""

    name = "chat_completions"

    def __init__(
        self,
        api_key: str,
        base_url: str,
        *,
        model: str,
        temperature: float = 0.4,
        max_tokens: int | None = None,
        connect_timeout_s: float | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = float(temperature)
        self.max_tokens = int(max_tokens) if max_tokens is not None else None
        self.connect_timeout_s = connect_timeout_s

    def _payload(self, messages: list[dict]) -> dict:
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if self.max_tokens is not None and self.max_tokens > 0:
            payload["max_tokens"] = self.max_tokens
        return payload

    async def generate(
        self,
        prompt: str,
        *,
        prior_text: str,
        repair_instruction: str,
        request_id: str,
        timeout_s: float | None = None,
    ) -> str:
        started = time.perf_counter()
        envelope = build_repair_prompt(prompt, prior_text=prior_text, repair_instruction=repair_instruction)
        headers = {
            "authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Request-ID": request_id,
        }
        timeout = httpx.Timeout(
            timeout=timeout_s,
            connect=self.connect_timeout_s if self.connect_timeout_s is not None else timeout_s,
        )
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=self._payload(envelope.to_messages()),
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as exc:
            raise GeneratorUnavailableError(f"rewrite request timed out: {exc}", error_kind=GENERATOR_ERROR_TIMEOUT) from exc
        except httpx.HTTPStatusError as exc:
            raise GeneratorUnavailableError(
                f"rewrite request returned {exc.response.status_code}",
                error_kind=GENERATOR_ERROR_HTTP_STATUS,
            ) from exc
        except httpx.HTTPError as exc:
            raise GeneratorUnavailableError(f"rewrite request failed: {exc}", error_kind=GENERATOR_ERROR_NETWORK) from exc

        choices = data.get("choices") or [{}]
        content = str((choices[0].get("message") or {}).get("content") or "").strip()
        if not content:
            raise GeneratorUnavailableError("rewrite response had no content", error_kind=GENERATOR_ERROR_EMPTY_OUTPUT)

        usage_raw = data.get("usage") or {}
        logger.debug(
            "chat completion request_id=%s model=%s prompt_tokens=%s completion_tokens=%s latency_ms=%s",
            request_id,
            self.model,
            int(usage_raw.get("prompt_tokens", 0) or 0),
            int(usage_raw.get("completion_tokens", 0) or 0),
            int((time.perf_counter() - started) * 1000),
        )
        return content
