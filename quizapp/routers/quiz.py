from fastapi import APIRouter, Depends, Request
from loguru import logger

from ..auth import user_id_from_auth_header
from ..deps import get_quiz_generator
from ..schemas import GenerateQuizRequest, QuizResponse
from ..services.quiz import QuizGenerator

router = APIRouter()

@router.post("/api/generate-quiz", response_model=QuizResponse)
async def generate_quiz(
    request: Request,
    body: GenerateQuizRequest,
    generator: QuizGenerator = Depends(get_quiz_generator),
):
    user_id = user_id_from_auth_header(request.headers.get("Authorization"))
    logger.info(f"[quiz] request user_id={user_id!r} topic={body.topic!r} complexity={body.complexity!r}")

    questions, tier = await generator.generate(
        body.topic,
        complexity=body.complexity,
        num_questions=body.numQuestions,
        previous_score=body.score,
    )
    return QuizResponse(questions=questions, complexity=tier)
