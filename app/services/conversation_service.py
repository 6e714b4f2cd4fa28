"""LINE conversation engine: routes each inbound event and sends the replies."""

from typing import Iterable, Optional

from app.logging_config import get_logger
from app.schemas.line import LineEvent
from app.services.ai_service import AiResponder
from app.services.backend_api import BackendApiError, ToyutoyuApiClient
from app.services.guided_faq import GuidedAnswer
from app.services.intent_service import Route, RouteDecision, is_valid_email, route_message
from app.services.line_service import LineMessagingClient, reply_with_images
from app.services.session_store import AwaitingPassword, LoggedIn, SessionStore
from app.services.state_machine import InvalidTransitionError

logger = get_logger("conversation_service")

MSG_GROUP_CONTEXT = "ご利用の際は、ボットと1対1のトークでメッセージを送ってください。"
MSG_CANCELLED = "キャンセルしました。"
MSG_ASK_EMAIL = "ログインします。登録済みのメールアドレスを送信してください。\n（中止する場合は「キャンセル」）"
MSG_INVALID_EMAIL = "メールアドレスの形式が正しくありません。もう一度送信してください。\n（中止する場合は「キャンセル」）"
MSG_ASK_PASSWORD = "パスワードを送信してください。\n（中止する場合は「キャンセル」）"
MSG_LOGIN_SUCCESS = "ログインしました。\n「ポイント」と送信すると、現在のポイント残高を確認できます。"
MSG_INVALID_CREDENTIALS = "メールアドレスまたはパスワードが正しくありません。\nもう一度「ログイン」から始めてください。"
MSG_AUTH_ERROR = "認証中にエラーが発生しました。しばらくしてから再度お試しください。"
MSG_SESSION_EXPIRED = "ログインの有効期限が切れました。もう一度「ログイン」と送信してください。"
MSG_LOGIN_REQUIRED = "ポイントを確認するには、先に「ログイン」と送信してログインしてください。"
MSG_POINTS_ERROR = "ポイントの取得に失敗しました。しばらくしてから再度お試しください。"
MSG_PASSWORD_HELP = (
    "ログインする場合は「ログイン」と送信し、案内に沿ってメールアドレスとパスワードを入力してください。\n"
    "パスワードをお忘れの場合は「パスワードを忘れた」と送信してください。"
)
MSG_CREDENTIAL_OUT_OF_FLOW = "ログインする場合は、先に「ログイン」と送信してください。"
MSG_AI_BUSY = "ただいま混み合っています。しばらくしてから再度お試しください。"
MSG_USAGE = (
    "ご利用方法\n"
    "・「ログイン」: アカウントにログイン\n"
    "・「ポイント」: ポイント残高の確認（ログイン後）\n"
    "・「キャンセル」: 操作の中止\n"
    "お支払い画面やパスワードなどについてのご質問も、そのまま送信してください。"
)
MSG_WELCOME = "友だち追加ありがとうございます！toyutoyu サポートです。\n\n" + MSG_USAGE


def format_points(points) -> str:
    if isinstance(points, bool):
        return str(points)
    if isinstance(points, int):
        return f"{points:,}"
    if isinstance(points, float):
        return f"{points:,.0f}" if points.is_integer() else f"{points:,}"
    return str(points)


def build_points_message(points) -> str:
    return f"現在のポイント残高は {format_points(points)} ポイントです。"


class ConversationHandler:
    def __init__(
        self,
        store: SessionStore,
        line: LineMessagingClient,
        backend: ToyutoyuApiClient,
        ai: AiResponder,
    ):
        self.store = store
        self.line = line
        self.backend = backend
        self.ai = ai

    async def process_events(self, events: Iterable[LineEvent]) -> None:
        """Handle events in order; one failing event does not stop the rest."""
        for event in events:
            try:
                await self.handle_event(event)
            except Exception as e:
                logger.error(
                    "Event handling failed",
                    extra={"context": {"event_type": event.type, "error": str(e)}},
                    exc_info=True,
                )

    async def handle_event(self, event: LineEvent) -> Optional[Route]:
        if event.type == "follow" and event.reply_token:
            await self.line.reply_text(event.reply_token, MSG_WELCOME)
            return None

        if event.type != "message" or event.message is None or event.message.type != "text":
            logger.debug(f"Ignoring event: type={event.type}")
            return None
        if not event.reply_token:
            logger.debug("Ignoring text event without reply token")
            return None

        return await self.handle_text(event.user_id, event.reply_token, event.message.text)

    async def handle_text(self, user_id: Optional[str], reply_token: str, text: Optional[str]) -> Route:
        session = self.store.get(user_id) if user_id else None
        decision = route_message(
            text,
            session,
            has_user=bool(user_id),
            ai_enabled=self.ai.is_configured,
        )
        logger.info(
            "Routed message",
            extra={
                "context": {
                    "user_id": user_id,
                    "route": decision.route.value,
                    "state": session.state.value if session else "idle",
                    "step": session.step.value if session and session.step else None,
                }
            },
        )

        route = decision.route
        if route == Route.IGNORE:
            return route
        if route == Route.GROUP_CONTEXT:
            await self._reply(reply_token, MSG_GROUP_CONTEXT)
        elif route == Route.CANCEL:
            self.store.clear(user_id)
            await self._reply(reply_token, MSG_CANCELLED)
        elif route == Route.LOGIN:
            self.store.start_login_flow(user_id)
            await self._reply(reply_token, MSG_ASK_EMAIL)
        elif route == Route.POINTS:
            await self._handle_points(user_id, reply_token)
        elif route == Route.GUIDED_ANSWER:
            await self._reply_guided(user_id, reply_token, decision.guided)
        elif route == Route.LOGIN_EMAIL:
            await self._handle_email(user_id, reply_token, decision)
        elif route == Route.LOGIN_PASSWORD:
            await self._handle_password(user_id, reply_token, decision)
        elif route == Route.CREDENTIAL_OUT_OF_FLOW:
            await self._reply(reply_token, MSG_CREDENTIAL_OUT_OF_FLOW)
        elif route == Route.PASSWORD_HELP:
            await self._reply(reply_token, MSG_PASSWORD_HELP)
        elif route == Route.AI:
            await self._handle_ai(reply_token, decision.text)
        elif route == Route.USAGE:
            await self._reply(reply_token, MSG_USAGE)
        else:
            raise ValueError(f"Unhandled route: {route}")
        return route

    async def _reply(self, reply_token: str, text: str) -> None:
        await self.line.reply_text(reply_token, text)

    async def _reply_guided(self, user_id: str, reply_token: str, guided: GuidedAnswer) -> None:
        await reply_with_images(self.line, user_id, reply_token, guided.response_text, guided.image_urls)

    async def _handle_points(self, user_id: str, reply_token: str) -> None:
        session = self.store.get(user_id)
        if not isinstance(session, LoggedIn):
            await self._reply(reply_token, MSG_LOGIN_REQUIRED)
            return

        try:
            points = await self.backend.get_user_points(session.email)
        except Exception as e:
            logger.error("Points lookup failed", extra={"context": {"user_id": user_id, "error": str(e)}})
            await self._reply(reply_token, MSG_POINTS_ERROR)
            return

        await self._reply(reply_token, build_points_message(points))

    async def _handle_email(self, user_id: str, reply_token: str, decision: RouteDecision) -> None:
        if not is_valid_email(decision.text):
            await self._reply(reply_token, MSG_INVALID_EMAIL)
            return

        try:
            self.store.set_await_password(user_id, decision.text)
        except InvalidTransitionError:
            await self._reply(reply_token, MSG_SESSION_EXPIRED)
            return
        await self._reply(reply_token, MSG_ASK_PASSWORD)

    async def _handle_password(self, user_id: str, reply_token: str, decision: RouteDecision) -> None:
        session = self.store.get(user_id)
        if not isinstance(session, AwaitingPassword):
            await self._reply(reply_token, MSG_SESSION_EXPIRED)
            return

        try:
            result = await self.backend.auth_check(session.email, decision.text)
        except BackendApiError as e:
            if e.status_code == 401:
                self.store.clear(user_id)
                await self._reply(reply_token, MSG_INVALID_CREDENTIALS)
                return
            logger.error("auth-check failed", extra={"context": {"status": e.status_code, "error": str(e)}})
            await self._reply(reply_token, MSG_AUTH_ERROR)
            return
        except Exception as e:
            logger.error("auth-check transport error", extra={"context": {"error": str(e)}})
            await self._reply(reply_token, MSG_AUTH_ERROR)
            return

        if not result.success:
            self.store.clear(user_id)
            await self._reply(reply_token, MSG_INVALID_CREDENTIALS)
            return

        try:
            self.store.set_logged_in(user_id, session.email, result.user_id)
        except InvalidTransitionError:
            current = self.store.get(user_id)
            # A concurrent password message for the same user already completed the login.
            if isinstance(current, LoggedIn) and current.email == session.email:
                await self._reply(reply_token, MSG_LOGIN_SUCCESS)
                return
            # The login window ran out while the backend was answering.
            await self._reply(reply_token, MSG_SESSION_EXPIRED)
            return
        await self._reply(reply_token, MSG_LOGIN_SUCCESS)

    async def _handle_ai(self, reply_token: str, text: str) -> None:
        result = await self.ai.generate_reply(text)
        if not result.ok:
            await self._reply(reply_token, MSG_AI_BUSY)
            return
        await self._reply(reply_token, result.value)
