import json
from unittest.mock import patch

import pytest

from conftest import StubLLM, VALID_QUIZ
from quizapp.errors import InvalidQuizFormat, ParseFailure
from quizapp.services.parse import (
    extract_array, repair, repair_prompt, strip_fences, validate_quiz,
)

CLEAN = json.loads(VALID_QUIZ)


# ── fence stripping / span extraction ───────────────────────────────────────

def test_strip_fences_with_language_tag():
    assert strip_fences("```json\n[1, 2]\n```") == "[1, 2]"


def test_strip_fences_without_tag():
    assert strip_fences("  ```\n[]\n```  ") == "[]"


def test_strip_fences_handles_none():
    assert strip_fences(None) == ""


def test_extract_array_drops_surrounding_prose():
    text = 'Sure! Here is your quiz:\n[ {"a": 1}, {"b": 2}]\nGood luck!'
    assert extract_array(text) == '[ {"a": 1}, {"b": 2}]'


def test_extract_array_allows_whitespace_between_bracket_and_brace():
    assert extract_array('x [\n  {"a": 1}] y') == '[\n  {"a": 1}]'


def test_extract_array_passes_through_when_no_span():
    assert extract_array('{"a": 1}') == '{"a": 1}'
    assert extract_array("no json here") == "no json here"


# ── pipeline ────────────────────────────────────────────────────────────────

async def test_valid_input_is_unchanged():
    llm = StubLLM(RuntimeError("model should not be called"))
    assert await repair(VALID_QUIZ, 2, llm) == CLEAN
    assert llm.calls == []


async def test_recovers_trailing_commas_single_quotes_and_fence():
    raw = (
        "```json\n"
        "[{'question': 'Q1', 'options': ['A', 'B', 'C', 'D',], 'correctAnswer': 'A',},"
        " {'question': 'Q2', 'options': ['A', 'B', 'C', 'D'], 'correctAnswer': 'B'},]\n"
        "```"
    )
    llm = StubLLM(RuntimeError("model should not be called"))
    assert await repair(raw, 2, llm) == CLEAN
    assert llm.calls == []


async def test_pretty_printed_array_with_prose_needs_no_model_call():
    raw = "Here is your quiz:\n" + json.dumps(CLEAN, indent=2) + "\nGood luck!"
    assert "}\n]" in raw
    llm = StubLLM(RuntimeError("model should not be called"))
    assert await repair(raw, 2, llm) == CLEAN
    assert llm.calls == []


async def test_recursion_in_local_repair_falls_back_to_model():
    llm = StubLLM(VALID_QUIZ)
    with patch("quizapp.services.parse.repair_json",
               side_effect=[RecursionError("maximum recursion depth exceeded"), VALID_QUIZ]):
        data = await repair("[" * 3000, 2, llm)
    assert data == CLEAN
    assert len(llm.repair_calls) == 1


async def test_recursion_in_model_repair_is_a_parse_failure():
    llm = StubLLM("[" * 3000)
    with patch("quizapp.services.parse.repair_json", side_effect=RecursionError("too deep")):
        with pytest.raises(ParseFailure):
            await repair("[" * 3000, 2, llm)
    assert len(llm.calls) == 1


async def test_end_to_end_fenced_example():
    raw = "```json\n" + VALID_QUIZ + "\n```"
    data = await repair(raw, 2, StubLLM(RuntimeError("unused")))
    assert [q["question"] for q in data] == ["Q1", "Q2"]


async def test_falls_back_to_model_repair():
    llm = StubLLM("```json\n" + VALID_QUIZ + "\n```")
    real = json.dumps(CLEAN)
    with patch("quizapp.services.parse.repair_json", side_effect=["{{ not json", real]):
        data = await repair("garbled output", 2, llm, max_tokens=700)

    assert data == CLEAN
    assert len(llm.calls) == 1
    assert llm.calls[0]["max_tokens"] == 700
    # the repair request carries the original raw text and the requested count
    assert "garbled output" in llm.prompts[0]
    assert "valid JSON array of 2 objects" in llm.prompts[0]


async def test_raises_parse_failure_when_model_repair_also_fails():
    llm = StubLLM("still broken")
    with patch("quizapp.services.parse.repair_json", return_value="{{ nope"):
        with pytest.raises(ParseFailure):
            await repair("garbled output", 2, llm)
    assert len(llm.calls) == 1


def test_repair_prompt_names_requested_count():
    assert "array of 7 objects" in repair_prompt("x", 7)


# ── schema validation ───────────────────────────────────────────────────────

def test_validate_quiz_accepts_clean_payload():
    questions = validate_quiz(CLEAN, 2)
    assert [q.correct_answer for q in questions] == ["A", "B"]
    assert questions[0].model_dump(by_alias=True)["correctAnswer"] == "A"


def test_validate_quiz_accepts_numeric_options_and_answer():
    data = [{"question": "What is 2+2?", "options": [3, 4, 5.5, 6], "correctAnswer": 4}]
    q = validate_quiz(data, 1)[0]
    assert q.options == ["3", "4", "5.5", "6"]
    assert q.correct_answer == "4"


def test_validate_quiz_rejects_boolean_options():
    data = [{"question": "Q", "options": [True, False, "x", "y"], "correctAnswer": "x"}]
    with pytest.raises(InvalidQuizFormat):
        validate_quiz(data, 1)


def test_validate_quiz_rejects_non_array():
    with pytest.raises(InvalidQuizFormat):
        validate_quiz({"questions": CLEAN}, 2)


@pytest.mark.parametrize("count", [1, 3])
def test_validate_quiz_rejects_count_mismatch(count):
    with pytest.raises(InvalidQuizFormat, match=f"Expected {count} questions, got 2"):
        validate_quiz(CLEAN, count)


@pytest.mark.parametrize("bad", [
    {"options": ["A", "B", "C", "D"], "correctAnswer": "A"},
    {"question": "  ", "options": ["A", "B", "C", "D"], "correctAnswer": "A"},
    {"question": "Q", "options": ["A", "B", "C"], "correctAnswer": "A"},
    {"question": "Q", "options": ["A", "B", "C", "D", "E"], "correctAnswer": "A"},
    {"question": "Q", "options": ["A", "A", "C", "D"], "correctAnswer": "A"},
    {"question": "Q", "options": ["A", "B", "C", "D"]},
    {"question": "Q", "options": ["A", "B", "C", "D"], "correctAnswer": ""},
    {"question": "Q", "options": ["A", "B", "C", "D"], "correctAnswer": "Z"},
    "not an object",
])
def test_validate_quiz_rejects_malformed_question(bad):
    with pytest.raises(InvalidQuizFormat):
        validate_quiz([bad], 1)
