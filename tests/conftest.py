"""
Shared test helpers.
Environment defaults are set before any quizapp import so Settings validates
without a provider key and the rate limiter never trips during a test run.
"""

import os

os.environ.setdefault("MOCK_MODE", "1")
os.environ.setdefault("RATE_LIMIT", "10000/minute")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key-for-unit-tests-only")

VALID_QUIZ = (
    '[{"question":"Q1","options":["A","B","C","D"],"correctAnswer":"A"},'
    '{"question":"Q2","options":["A","B","C","D"],"correctAnswer":"B"}]'
)


class ProviderError(Exception):
    """Provider failure carrying an HTTP status, like the SDK's status errors."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class StubLLM:
    """Deterministic stand-in for LLMClient.

    `replies` is consumed in order; an Exception instance is raised instead of
    returned. The last reply repeats once the list runs out.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def complete(self, messages, **kw):
        self.calls.append({"messages": messages, **kw})
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def prompts(self):
        return [c["messages"][-1]["content"] for c in self.calls]

    @property
    def generation_calls(self):
        return [p for p in self.prompts if p.startswith("Generate exactly")]

    @property
    def repair_calls(self):
        return [p for p in self.prompts if p.startswith("The following is a malformed")]
