"""Classify an inbound LINE text into exactly one handling route.

Pure functions only: no I/O, no session mutation.
"""

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.services.guided_faq import (
    GuidedAnswer,
    get_guided_answer,
    is_password_reset_question,
    match_guided_answer,
    mentions_password,
)
from app.services.session_store import AwaitingEmail, AwaitingPassword, LoggedIn, Session

CANCEL_COMMANDS = {"キャンセル", "cancel"}
LOGIN_COMMANDS = {"ログイン", "login"}
POINTS_COMMANDS = {"ポイント", "points", "ポイント確認"}

# Words that look like an attempt to drive the bot rather than a question for the AI.
COMMAND_LIKE_WORDS = ["ログイン", "login", "ログアウト", "logout", "キャンセル", "cancel", "ポイント確認"]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@.]+(\.[^\s@.]+)+$")
EMAIL_LIKE_PATTERN = re.compile(r"^\S+@\S+$")


class Route(str, Enum):
    IGNORE = "ignore"
    GROUP_CONTEXT = "group_context"
    CANCEL = "cancel"
    LOGIN = "login"
    POINTS = "points"
    GUIDED_ANSWER = "guided_answer"
    LOGIN_EMAIL = "login_email"
    LOGIN_PASSWORD = "login_password"
    CREDENTIAL_OUT_OF_FLOW = "credential_out_of_flow"
    PASSWORD_HELP = "password_help"
    AI = "ai"
    USAGE = "usage"


@dataclass(frozen=True)
class RouteDecision:
    route: Route
    text: str = ""
    guided: Optional[GuidedAnswer] = None


def normalize_text(text: Optional[str]) -> str:
    """NFKC-normalize, trim and collapse whitespace. Case is preserved."""
    if not text:
        return ""
    normalized = unicodedata.normalize("NFKC", text)
    return re.sub(r"\s+", " ", normalized).strip()


def normalize_for_matching(text: Optional[str]) -> str:
    return normalize_text(text).casefold()


def is_valid_email(text: str) -> bool:
    """Exactly one @, a non-empty local part and a dotted domain."""
    candidate = normalize_text(text)
    if candidate.count("@") != 1:
        return False
    return bool(EMAIL_PATTERN.match(candidate))


def looks_like_email(normalized: str) -> bool:
    return bool(EMAIL_LIKE_PATTERN.match(normalized))


def is_ai_eligible(normalized: str) -> bool:
    if not normalized:
        return False
    if mentions_password(normalized):
        return False
    return not any(word in normalized for word in COMMAND_LIKE_WORDS)


def route_message(
    text: Optional[str],
    session: Optional[Session],
    *,
    has_user: bool,
    ai_enabled: bool,
) -> RouteDecision:
    cleaned = normalize_text(text)
    if not cleaned:
        return RouteDecision(Route.IGNORE)
    if not has_user:
        return RouteDecision(Route.GROUP_CONTEXT, cleaned)

    normalized = cleaned.casefold()
    if normalized in CANCEL_COMMANDS:
        return RouteDecision(Route.CANCEL, cleaned)
    if normalized in LOGIN_COMMANDS:
        return RouteDecision(Route.LOGIN, cleaned)
    if normalized in POINTS_COMMANDS:
        return RouteDecision(Route.POINTS, cleaned)

    if isinstance(session, AwaitingEmail):
        return RouteDecision(Route.LOGIN_EMAIL, cleaned)
    if isinstance(session, AwaitingPassword):
        # Users often type a question here instead of their password.
        if is_password_reset_question(normalized):
            return RouteDecision(Route.GUIDED_ANSWER, cleaned, get_guided_answer("password_reset"))
        # Passwords are passed on untouched apart from surrounding whitespace.
        return RouteDecision(Route.LOGIN_PASSWORD, (text or "").strip())
    if session is not None and not isinstance(session, LoggedIn):
        raise TypeError(f"Unknown session type: {type(session).__name__}")

    guided = match_guided_answer(normalized)
    if guided is not None:
        return RouteDecision(Route.GUIDED_ANSWER, cleaned, guided)
    if looks_like_email(normalized):
        return RouteDecision(Route.CREDENTIAL_OUT_OF_FLOW, cleaned)
    if mentions_password(normalized):
        return RouteDecision(Route.PASSWORD_HELP, cleaned)
    if not ai_enabled or not is_ai_eligible(normalized):
        return RouteDecision(Route.USAGE, cleaned)
    return RouteDecision(Route.AI, cleaned)
