import asyncio
from typing import Optional

from app.logging_config import get_logger
from app.services.llm import LLMProvider, OpenAIProvider
from app.services.result import Result

logger = get_logger("ai_service")

AI_TIMEOUT_SECONDS = 30.0
AI_MAX_TOKENS = 600

SYSTEM_PROMPT = """あなたは「toyutoyu」のLINEサポート担当アシスタントです。
- 日本語で、丁寧かつ簡潔（300文字程度まで）に回答してください。
- toyutoyu のサービス内容・使い方に関する質問に答えてください。
- パスワードやログイン情報を尋ねたり、受け取ったりしてはいけません。
- 分からないことは推測せず、「お問い合わせ」フォームからの連絡を案内してください。
- ポイント残高の確認は「ログイン」→「ポイント」の手順を案内してください。"""


def build_messages(user_text: str, system_prompt: str = SYSTEM_PROMPT) -> list[dict]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_text},
    ]


class AiResponder:
    """Free-text fallback answers via an LLM provider."""

    def __init__(self, provider: Optional[LLMProvider], model: Optional[str] = None):
        self.provider = provider
        self.model = model

    @property
    def is_configured(self) -> bool:
        return self.provider is not None

    async def generate_reply(self, user_text: str) -> Result[str]:
        if self.provider is None:
            return Result.failure("AI provider not configured", "ai_not_configured")

        try:
            response = await asyncio.to_thread(
                self.provider.generate,
                build_messages(user_text),
                model=self.model,
                max_tokens=AI_MAX_TOKENS,
                timeout_seconds=AI_TIMEOUT_SECONDS,
            )
        except Exception as e:
            logger.error("AI reply failed", extra={"context": {"error": str(e)}}, exc_info=True)
            return Result.from_exception(e, "ai_error")

        content = (response.content or "").strip()
        if not content:
            logger.warning("AI returned empty content", extra={"context": {"model": response.model}})
            return Result.failure("Empty AI response", "empty_response")
        return Result.success(content)


def build_ai_responder(api_key: Optional[str], model: str) -> AiResponder:
    if not api_key:
        logger.info("OPENAI_API_KEY not set; AI replies disabled")
        return AiResponder(provider=None, model=model)
    return AiResponder(provider=OpenAIProvider(api_key=api_key, default_model=model), model=model)
