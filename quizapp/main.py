from __future__ import annotations

from fastapi import FastAPI, Request, Header
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler

from .settings import settings
from .auth import user_id_from_auth_header
from .errors import QuizAppError
from .routers import quiz, explain

# ---------- logging ----------
logger.remove()
logger.add(
    lambda msg: print(msg, end=""),
    format="{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {message}",
    level="INFO",
)

# ---------- app / limiter ----------
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT])
app = FastAPI(title="Quiz App API", version="1.0.0")
app.state.limiter = limiter

# ---------- CORS ----------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "Authorization", "Content-Type", "X-Requested-With"],
)

# SlowAPI middleware + handler
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ---------- error rendering ----------
@app.exception_handler(QuizAppError)
async def quiz_app_error_handler(request: Request, exc: QuizAppError):
    logger.error(f"[error] {request.url.path} -> {exc.status_code} {exc.error}: {exc.details}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})

# ---------- health / whoami ----------
@app.get("/health", response_class=PlainTextResponse)
def health():
    return "Backend is healthy"

@app.get("/whoami")
def whoami(Authorization: str | None = Header(default=None)):
    return {"user_id": user_id_from_auth_header(Authorization)}

# ---------- routers ----------
app.include_router(quiz.router, tags=["quiz"])
app.include_router(explain.router, tags=["explain"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("quizapp.main:app", host="0.0.0.0", port=settings.PORT)
