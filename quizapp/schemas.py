from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

def _as_text(v: Any) -> Any:
    # models answer numeric topics with bare numbers; bools stay invalid
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v

class QuizQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    options: List[str]
    correct_answer: str = Field(alias="correctAnswer")

    @field_validator("question", "correct_answer", mode="before")
    @classmethod
    def _number_to_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("options", mode="before")
    @classmethod
    def _numbers_to_text(cls, v: Any) -> Any:
        return [_as_text(o) for o in v] if isinstance(v, list) else v

    @field_validator("question", "correct_answer")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("options")
    @classmethod
    def _four_distinct(cls, v: List[str]) -> List[str]:
        if len(v) != 4:
            raise ValueError("exactly 4 options")
        if len(set(v)) != 4:
            raise ValueError("options must be distinct")
        return v

    @model_validator(mode="after")
    def _answer_is_an_option(self) -> "QuizQuestion":
        if self.correct_answer not in self.options:
            raise ValueError("correctAnswer must match one of the options")
        return self

class GenerateQuizRequest(BaseModel):
    topic: str
    complexity: Optional[str] = None
    # clamped by the service, anything goes on the wire
    numQuestions: Any = 10
    score: Optional[float] = None

class QuizResponse(BaseModel):
    questions: List[QuizQuestion]
    complexity: str

class ExplanationRequest(BaseModel):
    question: str
    selectedOption: str
    correctOption: str

class ExplanationResponse(BaseModel):
    explanation: str
