from abc import ABC, abstractmethod


class TextGenerator(ABC):
    name: str

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        prior_text: str,
        repair_instruction: str,
        request_id: str,
        timeout_s: float | None = None,
    ) -> str:
        pass
