from fastapi import APIRouter, Depends, Request
from loguru import logger

from ..auth import user_id_from_auth_header
from ..deps import get_explainer
from ..schemas import ExplanationRequest, ExplanationResponse
from ..services.explain import Explainer

router = APIRouter()

@router.post("/api/explain-answer", response_model=ExplanationResponse)
async def explain_answer(
    request: Request,
    body: ExplanationRequest,
    explainer: Explainer = Depends(get_explainer),
):
    user_id = user_id_from_auth_header(request.headers.get("Authorization"))
    logger.info(f"[explain] request user_id={user_id!r} correct={body.selectedOption == body.correctOption}")

    explanation = await explainer.explain(body.question, body.selectedOption, body.correctOption)
    return ExplanationResponse(explanation=explanation)
