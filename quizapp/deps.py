from functools import lru_cache
from fastapi import Depends
from .settings import settings
from .services.llm import LLMClient
from .services.quiz import QuizGenerator
from .services.explain import Explainer

@lru_cache(maxsize=1)
def get_llm() -> LLMClient:
    return LLMClient.from_settings(settings)

def get_quiz_generator(llm: LLMClient = Depends(get_llm)) -> QuizGenerator:
    return QuizGenerator(
        llm,
        max_attempts=settings.MAX_ATTEMPTS,
        temperature=settings.QUIZ_TEMPERATURE,
    )

def get_explainer(llm: LLMClient = Depends(get_llm)) -> Explainer:
    return Explainer(
        llm,
        max_tokens=settings.EXPLAIN_MAX_TOKENS,
        temperature=settings.EXPLAIN_TEMPERATURE,
    )
