"""In-memory per-user session state for the LINE conversation.

Sessions live only in this process. There is no lock: the store is used from a
single event loop, and if two deliveries for the same user race the last write
wins (the user can always resend the login command).
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Optional, Union

from app.logging_config import get_logger
from app.services.state_machine import FlowState, accept_email, complete_login, start_login

logger = get_logger("session_store")

DEFAULT_LOGIN_FLOW_TTL_SECONDS = 10 * 60
DEFAULT_LOGGED_IN_TTL_SECONDS = 60 * 60


class SessionState(str, Enum):
    IDLE = "idle"
    LOGIN = "login"
    LOGGED_IN = "logged_in"


class LoginStep(str, Enum):
    AWAIT_EMAIL = "await_email"
    AWAIT_PASSWORD = "await_password"


@dataclass(frozen=True)
class AwaitingEmail:
    expires_at: float

    state: ClassVar[SessionState] = SessionState.LOGIN
    step: ClassVar[Optional[LoginStep]] = LoginStep.AWAIT_EMAIL
    flow_state: ClassVar[FlowState] = FlowState.AWAITING_EMAIL


@dataclass(frozen=True)
class AwaitingPassword:
    email: str
    expires_at: float

    state: ClassVar[SessionState] = SessionState.LOGIN
    step: ClassVar[Optional[LoginStep]] = LoginStep.AWAIT_PASSWORD
    flow_state: ClassVar[FlowState] = FlowState.AWAITING_PASSWORD

    def __post_init__(self):
        if not self.email:
            raise ValueError("AwaitingPassword requires an email")


@dataclass(frozen=True)
class LoggedIn:
    email: str
    backend_user_id: Optional[str]
    expires_at: float

    state: ClassVar[SessionState] = SessionState.LOGGED_IN
    step: ClassVar[Optional[LoginStep]] = None
    flow_state: ClassVar[FlowState] = FlowState.LOGGED_IN


Session = Union[AwaitingEmail, AwaitingPassword, LoggedIn]


def flow_state_of(session: Optional[Session]) -> FlowState:
    return session.flow_state if session is not None else FlowState.IDLE


class SessionStore:
    def __init__(
        self,
        login_flow_ttl_seconds: float = DEFAULT_LOGIN_FLOW_TTL_SECONDS,
        logged_in_ttl_seconds: float = DEFAULT_LOGGED_IN_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.login_flow_ttl_seconds = login_flow_ttl_seconds
        self.logged_in_ttl_seconds = logged_in_ttl_seconds
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        self.cleanup_expired()
        return len(self._sessions)

    def cleanup_expired(self) -> int:
        now = self._clock()
        expired = [user_id for user_id, session in self._sessions.items() if session.expires_at <= now]
        for user_id in expired:
            del self._sessions[user_id]
        if expired:
            logger.debug(f"Expired {len(expired)} session(s)")
        return len(expired)

    def get(self, user_id: str) -> Optional[Session]:
        self.cleanup_expired()
        return self._sessions.get(user_id)

    def start_login_flow(self, user_id: str) -> AwaitingEmail:
        start_login(flow_state_of(self.get(user_id)))
        session = AwaitingEmail(expires_at=self._clock() + self.login_flow_ttl_seconds)
        self._sessions[user_id] = session
        return session

    def set_await_password(self, user_id: str, email: str) -> AwaitingPassword:
        accept_email(flow_state_of(self.get(user_id)))
        session = AwaitingPassword(email=email, expires_at=self._clock() + self.login_flow_ttl_seconds)
        self._sessions[user_id] = session
        return session

    def set_logged_in(self, user_id: str, email: str, backend_user_id: Optional[str]) -> LoggedIn:
        complete_login(flow_state_of(self.get(user_id)))
        session = LoggedIn(
            email=email,
            backend_user_id=backend_user_id,
            expires_at=self._clock() + self.logged_in_ttl_seconds,
        )
        self._sessions[user_id] = session
        return session

    def clear(self, user_id: str) -> None:
        self._sessions.pop(user_id, None)
