from __future__ import annotations

from dataclasses import dataclass

REPAIR_SYSTEM_PROMPT = (
    "You revise story drafts. Apply the repair directives exactly. "
    "Return only the revised story text. No markdown. No explanation."
)


@dataclass(frozen=True, slots=True)
class PromptEnvelope:
    system_text: str
    user_text: str
    tags: tuple[str, ...] = ()

    def to_messages(self) -> list[dict]:
        return [
            {"role": "system", "content": self.system_text},
            {"role": "user", "content": self.user_text},
        ]


def build_repair_prompt(prompt: str, *, prior_text: str, repair_instruction: str) -> PromptEnvelope:
    user_text = "\n\n".join(
        [
            "ORIGINAL BRIEF:",
            str(prompt or "").strip(),
            "DRAFT TO REVISE:",
            str(prior_text or "").strip(),
            "REPAIR DIRECTIVES:",
            str(repair_instruction or "").strip(),
        ]
    )
    return PromptEnvelope(system_text=REPAIR_SYSTEM_PROMPT, user_text=user_text, tags=("repair",))
