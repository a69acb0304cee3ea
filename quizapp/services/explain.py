from typing import Optional
from loguru import logger
from ..errors import ExplanationFailed, InsufficientCredits, describe_provider_error, is_billing_error
from .parse import Completer, strip_fences


def explanation_prompt(question: str, selected: str, correct: str) -> str:
    if selected == correct:
        return (
            f"For the question: \"{question}\", explain concisely why option \"{correct}\" "
            f"is the correct answer. Focus only on the explanation of correctness."
        )
    return (
        f"For the question: \"{question}\", explain concisely why option \"{correct}\" "
        f"is the correct answer and why option \"{selected}\" is incorrect. "
        f"Focus only on the explanation of correctness and incorrectness."
    )


class Explainer:
    def __init__(self, llm: Completer, *, model: Optional[str] = None,
                 max_tokens: int = 400, temperature: float = 0.3):
        self.llm = llm
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def explain(self, question: str, selected: str, correct: str) -> str:
        kw = {"max_tokens": self.max_tokens, "temperature": self.temperature}
        if self.model:
            kw["model"] = self.model
        try:
            raw = await self.llm.complete(
                [{"role": "user", "content": explanation_prompt(question, selected, correct)}], **kw
            )
        except Exception as e:
            logger.warning(f"[explain] model call failed: {e}")
            if is_billing_error(e):
                raise InsufficientCredits(describe_provider_error(e)) from e
            raise ExplanationFailed(describe_provider_error(e)) from e
        return strip_fences(raw)
