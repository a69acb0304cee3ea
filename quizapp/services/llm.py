import asyncio, json, re
from typing import Dict, List, Optional
from loguru import logger
from openai import OpenAI
from ..settings import Settings, settings as default_settings

Messages = List[Dict[str, str]]

_COUNT_RE = re.compile(r"exactly (\d+) quiz questions", re.IGNORECASE)


def _mock_reply(messages: Messages) -> str:
    prompt = (messages[-1].get("content", "") if messages else "")
    m = _COUNT_RE.search(prompt)
    if m:
        n = int(m.group(1))
        questions = [
            {
                "question": f"Mock question {i}?",
                "options": ["Alpha", "Beta", "Gamma", "Delta"],
                "correctAnswer": "Alpha",
            }
            for i in range(1, n + 1)
        ]
        return "```json\n" + json.dumps(questions) + "\n```"
    return "This is a MOCK explanation."


class LLMClient:
    """Thin chat-completion wrapper shared by the quiz and explanation services.

    The SDK client is created on first use and holds no per-request state, so a
    single instance is safe to share across concurrent requests.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: str,
        base_url: str,
        timeout: float = 60.0,
        headers: Optional[Dict[str, str]] = None,
        mock: bool = False,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}
        self.mock = mock
        self._client: Optional[OpenAI] = None

    @classmethod
    def from_settings(cls, s: Settings = default_settings) -> "LLMClient":
        return cls(
            api_key=s.OPENROUTER_API_KEY,
            model=s.OPENAI_MODEL,
            base_url=s.OPENAI_BASE_URL,
            timeout=s.LLM_TIMEOUT,
            headers={"HTTP-Referer": s.APP_REFERER, "X-Title": s.APP_TITLE},
            mock=s.MOCK_MODE,
        )

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            # retries belong to the generation loop, not the transport
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                default_headers=self.headers,
            )
        return self._client

    def _complete_sync(self, messages: Messages, *, model: Optional[str] = None,
                       max_tokens: int = 400, temperature: float = 0.2) -> str:
        if self.mock:
            return _mock_reply(messages)
        resp = self.client.chat.completions.create(
            model=model or self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return resp.choices[0].message.content or ""

    async def complete(self, messages: Messages, **kw) -> str:
        logger.debug(f"[llm] model={kw.get('model') or self.model} max_tokens={kw.get('max_tokens')}")
        return await asyncio.to_thread(self._complete_sync, messages, **kw)
