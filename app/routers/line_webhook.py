from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from app.config import settings
from app.dependencies import get_conversation_handler
from app.logging_config import get_logger
from app.schemas.line import LineWebhookPayload
from app.services.conversation_service import ConversationHandler
from app.services.signature_service import verify_line_signature

logger = get_logger("line_webhook")

router = APIRouter()


def parse_line_payload(raw_body: bytes) -> Optional[LineWebhookPayload]:
    try:
        return LineWebhookPayload.model_validate_json(raw_body)
    except ValidationError as e:
        logger.warning(f"Invalid LINE webhook payload: {e}")
        return None


@router.post("/callback", response_class=PlainTextResponse)
async def line_callback(
    request: Request,
    background_tasks: BackgroundTasks,
    x_line_signature: Optional[str] = Header(default=None, alias="x-line-signature"),
    handler: ConversationHandler = Depends(get_conversation_handler),
):
    """LINE webhook: verify the signature on the raw body, acknowledge, process events afterwards."""
    raw_body = await request.body()

    if not verify_line_signature(settings.line_channel_secret, raw_body, x_line_signature):
        logger.warning("Rejected LINE webhook with invalid signature")
        return PlainTextResponse("invalid signature", status_code=401)

    payload = parse_line_payload(raw_body)
    if payload is None or not payload.events:
        return PlainTextResponse("ok")

    if not handler.line.is_configured:
        logger.warning(
            "LINE_CHANNEL_ACCESS_TOKEN not configured; events acknowledged but not processed",
            extra={"context": {"events": len(payload.events)}},
        )
        return PlainTextResponse("ok")

    # Runs after the response is sent, so LINE never waits on our collaborators.
    background_tasks.add_task(handler.process_events, payload.events)
    return PlainTextResponse("ok")
