from nuance_qc.modules.llm.providers.chat_completions import ChatCompletionsGenerator
from nuance_qc.modules.llm.providers.fake import FakeGenerator

__all__ = ["ChatCompletionsGenerator", "FakeGenerator"]
