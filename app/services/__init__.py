from app.services.session_store import (
    AwaitingEmail,
    AwaitingPassword,
    LoggedIn,
    LoginStep,
    Session,
    SessionState,
    SessionStore,
)
from app.services.state_machine import (
    FlowState,
    InvalidTransitionError,
    accept_email,
    can_transition,
    complete_login,
    start_login,
    transition,
)
