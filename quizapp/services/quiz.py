from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from loguru import logger

from ..errors import GenerationFailed, InsufficientCredits, describe_provider_error, is_billing_error
from ..schemas import QuizQuestion
from ..settings import settings
from .parse import Completer, repair, validate_quiz

TIERS = ("beginner", "intermediate", "advanced")
DEFAULT_TIER = "intermediate"
DEFAULT_QUESTIONS = 10
MIN_QUESTIONS, MAX_QUESTIONS = 1, 100

_UNSAFE_RE = re.compile(r'[<>"]')


def sanitize_topic(topic: str) -> str:
    return _UNSAFE_RE.sub("", topic or "").strip()


def clamp_question_count(value: Any) -> int:
    """Coerce whatever the client sent into 1..100; junk falls back to 10."""
    if isinstance(value, bool) or value is None:
        return DEFAULT_QUESTIONS
    try:
        f = float(value)
    except (TypeError, ValueError):
        return DEFAULT_QUESTIONS
    if math.isnan(f):
        return DEFAULT_QUESTIONS
    if math.isinf(f):
        return MAX_QUESTIONS if f > 0 else MIN_QUESTIONS
    return min(max(MIN_QUESTIONS, int(f)), MAX_QUESTIONS)


def normalize_tier(value: Optional[str]) -> str:
    v = (value or "").strip().lower()
    return v if v in TIERS else DEFAULT_TIER


def next_tier(current: Optional[str], score: float) -> str:
    idx = TIERS.index(normalize_tier(current))
    if score >= 80:
        idx = min(idx + 1, len(TIERS) - 1)
    elif score <= 50:
        idx = max(idx - 1, 0)
    return TIERS[idx]


def quiz_prompt(topic: str, tier: str, n: int) -> str:
    return (
        f"Generate exactly {n} quiz questions about {topic} at {tier} level. "
        f"Each question must have: \"question\" string, \"options\" array of 4 distinct strings, "
        f"\"correctAnswer\" string matching one option exactly. "
        f"Output ONLY a valid JSON array of objects, starting with [ and ending with ]. "
        f"Do not include any markdown, code blocks or extra text. "
        f"All keys and strings must be double-quoted, with no trailing commas. "
        f"Escape any double quotes that appear inside string values."
    )


def max_tokens_for(n: int) -> int:
    return min(settings.BASE_QUIZ_TOKENS + settings.TOKENS_PER_QUESTION * n, settings.MAX_QUIZ_TOKENS)


# ---------- retry state machine ----------

@dataclass(frozen=True)
class Attempting:
    n: int


@dataclass(frozen=True)
class Succeeded:
    questions: Tuple[QuizQuestion, ...]


@dataclass(frozen=True)
class CreditsExhausted:
    message: str


@dataclass(frozen=True)
class Failed:
    message: str


State = Union[Attempting, Succeeded, CreditsExhausted, Failed]


def on_success(state: Attempting, questions: List[QuizQuestion]) -> State:
    return Succeeded(tuple(questions))


def on_failure(state: Attempting, exc: BaseException, max_attempts: int) -> State:
    if is_billing_error(exc):
        return CreditsExhausted(describe_provider_error(exc))
    if state.n < max_attempts:
        return Attempting(state.n + 1)
    return Failed(describe_provider_error(exc))


class QuizGenerator:
    def __init__(self, llm: Completer, *, max_attempts: int = 3,
                 model: Optional[str] = None, temperature: float = 0.2):
        self.llm = llm
        self.max_attempts = max_attempts
        self.model = model
        self.temperature = temperature

    def resolve_tier(self, complexity: Optional[str], previous_score: Optional[float]) -> str:
        if previous_score is None:
            return normalize_tier(complexity)
        return next_tier(complexity, previous_score)

    async def _attempt(self, topic: str, tier: str, n: int) -> List[QuizQuestion]:
        kw = {"max_tokens": max_tokens_for(n), "temperature": self.temperature}
        if self.model:
            kw["model"] = self.model
        raw = await self.llm.complete(
            [{"role": "user", "content": quiz_prompt(topic, tier, n)}], **kw
        )
        logger.debug(f"[quiz] raw model text: {raw!r}")
        data = await repair(raw, n, self.llm, **kw)
        return validate_quiz(data, n)

    async def generate(self, topic: str, complexity: Optional[str] = None,
                       num_questions: Any = DEFAULT_QUESTIONS,
                       previous_score: Optional[float] = None) -> Tuple[List[QuizQuestion], str]:
        """Return (questions, tier used). Raises InsufficientCredits or GenerationFailed."""
        topic = sanitize_topic(topic)
        n = clamp_question_count(num_questions)
        tier = self.resolve_tier(complexity, previous_score)

        state: State = Attempting(1)
        while isinstance(state, Attempting):
            logger.info(f"[quiz] attempt {state.n}/{self.max_attempts} topic={topic!r} tier={tier} n={n}")
            try:
                questions = await self._attempt(topic, tier, n)
            except Exception as e:
                logger.warning(f"[quiz] attempt {state.n} failed: {e}")
                state = on_failure(state, e, self.max_attempts)
            else:
                state = on_success(state, questions)

        if isinstance(state, Succeeded):
            logger.info(f"[quiz] generated {len(state.questions)} questions")
            return list(state.questions), tier
        if isinstance(state, CreditsExhausted):
            raise InsufficientCredits(state.message)
        raise GenerationFailed(
            state.message,
            error=f"Failed to generate quiz after {self.max_attempts} attempts",
        )
