from nuance_qc.config import Settings, settings as default_settings
from nuance_qc.modules.llm.base import TextGenerator
from nuance_qc.modules.llm.errors import GeneratorConfigError
from nuance_qc.modules.llm.providers import ChatCompletionsGenerator, FakeGenerator

# Aliases for OpenAI-compatible gateways.
_CHAT_COMPLETIONS_PROVIDERS = {"chat_completions", "openai", "openai_compatible"}


def build_generator(settings: Settings | None = None) -> TextGenerator:
    cfg = settings or default_settings
    provider = str(cfg.generator_provider or "").strip().lower()
    if provider == "fake":
        return FakeGenerator()
    if provider in _CHAT_COMPLETIONS_PROVIDERS:
        if not str(cfg.generator_api_key or "").strip():
            raise GeneratorConfigError(f"generator provider '{provider}' requires GENERATOR_API_KEY")
        return ChatCompletionsGenerator(
            api_key=cfg.generator_api_key,
            base_url=cfg.generator_base_url,
            model=cfg.generator_model,
            temperature=cfg.generator_temperature,
            max_tokens=cfg.generator_max_tokens,
            connect_timeout_s=cfg.generator_connect_timeout_s,
        )
    raise GeneratorConfigError(f"unknown generator provider: {cfg.generator_provider!r}")
