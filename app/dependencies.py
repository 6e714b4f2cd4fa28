"""Process-wide collaborators, built once from settings and injected into routes."""

from functools import lru_cache

from app.config import settings
from app.services.ai_service import AiResponder, build_ai_responder
from app.services.backend_api import ToyutoyuApiClient
from app.services.conversation_service import ConversationHandler
from app.services.line_service import LineMessagingClient
from app.services.notifier import Notifier
from app.services.session_store import SessionStore


@lru_cache
def get_session_store() -> SessionStore:
    return SessionStore(
        login_flow_ttl_seconds=settings.login_flow_ttl_seconds,
        logged_in_ttl_seconds=settings.logged_in_ttl_seconds,
    )


@lru_cache
def get_line_client() -> LineMessagingClient:
    return LineMessagingClient(settings.line_channel_access_token)


@lru_cache
def get_backend_client() -> ToyutoyuApiClient:
    return ToyutoyuApiClient(
        settings.toyutoyu_base_url,
        webhook_secret=settings.toyutoyu_webhook_secret or None,
        timeout_seconds=settings.backend_timeout_seconds,
    )


@lru_cache
def get_ai_responder() -> AiResponder:
    return build_ai_responder(settings.openai_api_key, settings.openai_model)


@lru_cache
def get_notifier() -> Notifier:
    return Notifier(get_line_client(), to=settings.line_to or None, broadcast=settings.line_broadcast)


@lru_cache
def get_conversation_handler() -> ConversationHandler:
    return ConversationHandler(
        store=get_session_store(),
        line=get_line_client(),
        backend=get_backend_client(),
        ai=get_ai_responder(),
    )
