from enum import Enum


class FlowState(str, Enum):
    IDLE = "idle"
    AWAITING_EMAIL = "awaiting_email"
    AWAITING_PASSWORD = "awaiting_password"
    LOGGED_IN = "logged_in"


# Clearing a session is always allowed and is not listed here.
VALID_TRANSITIONS = {
    FlowState.IDLE: [FlowState.AWAITING_EMAIL],
    FlowState.AWAITING_EMAIL: [FlowState.AWAITING_EMAIL, FlowState.AWAITING_PASSWORD],
    FlowState.AWAITING_PASSWORD: [FlowState.AWAITING_EMAIL, FlowState.LOGGED_IN],
    FlowState.LOGGED_IN: [FlowState.AWAITING_EMAIL],
}


class InvalidTransitionError(Exception):
    def __init__(self, from_state: FlowState, to_state: FlowState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid transition: {from_state.value} -> {to_state.value}")


def can_transition(from_state: FlowState, to_state: FlowState) -> bool:
    """Check if transition is valid."""
    allowed = VALID_TRANSITIONS.get(from_state, [])
    return to_state in allowed


def transition(from_state: FlowState, to_state: FlowState) -> FlowState:
    """Perform state transition. Raises InvalidTransitionError if not allowed."""
    if not can_transition(from_state, to_state):
        raise InvalidTransitionError(from_state, to_state)
    return to_state


def start_login(current_state: FlowState) -> FlowState:
    """Begin (or restart) the login flow."""
    return transition(current_state, FlowState.AWAITING_EMAIL)


def accept_email(current_state: FlowState) -> FlowState:
    """E-mail captured, wait for the password."""
    return transition(current_state, FlowState.AWAITING_PASSWORD)


def complete_login(current_state: FlowState) -> FlowState:
    """Backend accepted the credentials."""
    return transition(current_state, FlowState.LOGGED_IN)
