import json, re
from typing import Any, List, Protocol
from json_repair import repair_json
from loguru import logger
from pydantic import ValidationError
from ..errors import InvalidQuizFormat, ParseFailure
from ..schemas import QuizQuestion

_FENCE_RE = re.compile(r"```(?:json|JSON)?")
_ARRAY_START_RE = re.compile(r"\[\s*\{")


class Completer(Protocol):
    async def complete(self, messages, **kw) -> str: ...


def strip_fences(s: str) -> str:
    return _FENCE_RE.sub("", s or "").strip()


def extract_array(s: str) -> str:
    """Slice from the first `[{` to the last `}]`; pass through when absent."""
    m = _ARRAY_START_RE.search(s)
    end = s.rfind("}]")
    if m and end > m.start():
        return s[m.start():end + 2]
    return s


def auto_repair(s: str) -> str:
    return repair_json(s)


def _loads(s: str) -> Any:
    return json.loads(auto_repair(s))


def repair_prompt(raw: str, expected_count: int) -> str:
    return (
        f"The following is a malformed JSON array of quiz questions. "
        f"Fix it to be a valid JSON array of {expected_count} objects, each with "
        f"\"question\" (string), \"options\" (array of 4 strings), "
        f"\"correctAnswer\" (string matching one option). "
        f"Ensure proper escaping of inner quotes and no syntax errors. "
        f"Return only the JSON array.\nMalformed content: {raw}"
    )


async def repair(raw: str, expected_count: int, llm: Completer, **llm_kw) -> Any:
    """Coerce raw model text into parsed JSON.

    Fences are stripped, the array span is cut out and run through a generic
    JSON repair pass. If that still does not parse, the model is asked once to
    fix its own output, which goes through the same repair pass. Raises
    ParseFailure when both routes fail.
    """
    text = extract_array(strip_fences(raw))
    try:
        return _loads(text)
    except (ValueError, RecursionError) as e:
        logger.info(f"[repair] local repair failed ({e}); asking model to fix output")

    fixed = await llm.complete(
        [{"role": "user", "content": repair_prompt(raw, expected_count)}], **llm_kw
    )
    text = strip_fences(fixed)
    try:
        return _loads(text)
    except (ValueError, RecursionError) as e:
        raise ParseFailure(f"Model-assisted repair did not yield JSON: {e}") from e


def validate_quiz(data: Any, expected_count: int) -> List[QuizQuestion]:
    if not isinstance(data, list):
        raise InvalidQuizFormat(f"Expected a JSON array, got {type(data).__name__}")
    if len(data) != expected_count:
        raise InvalidQuizFormat(f"Expected {expected_count} questions, got {len(data)}")
    try:
        return [QuizQuestion.model_validate(q) for q in data]
    except ValidationError as e:
        raise InvalidQuizFormat(str(e)) from e
