import logging
import time
from typing import Callable, Optional

from cachetools import TTLCache

from models.enums import FlowType
from models.state import FlowState

logger = logging.getLogger(__name__)

Mutator = Callable[[FlowState], Optional[FlowState]]


class SessionRegistry:
    """
    In-memory conversation state, one slot per Telegram user.

    A slot holds the state of at most one flow. Starting a flow replaces
    whatever the slot held, so a user is never inside two flows at once.
    Slots untouched for ``idle_timeout`` seconds are evicted.
    """

    def __init__(self, idle_timeout: float = 3600, max_sessions: int = 10000,
            timer: Callable[[], float] = time.monotonic):
        self._sessions: TTLCache = TTLCache(maxsize=max_sessions, ttl=idle_timeout, timer=timer)

    def start(self, user_id: int, state: FlowState) -> FlowState:
        """Puts a fresh flow state in the user's slot, cancelling any previous flow."""
        previous = self._sessions.get(user_id)
        if previous is not None:
            logger.info("User %s left unfinished %s flow for %s.", user_id, previous.flow.value, state.flow.value)
        self._sessions[user_id] = state
        logger.debug("User %s started %s at step %s", user_id, state.flow.value, state.step.value)
        return state

    def get(self, user_id: int, flow: Optional[FlowType] = None) -> Optional[FlowState]:
        """Returns the user's state, optionally only if it belongs to ``flow``."""
        state = self._sessions.get(user_id)
        if state is None or (flow is not None and state.flow != flow):
            return None
        return state

    def update(self, user_id: int, mutator: Mutator) -> Optional[FlowState]:
        """
        Applies ``mutator`` to the user's state and stores the result.

        The mutator may modify the state in place and return None, or return
        a replacement. Updating also restarts the idle timer.
        """
        state = self._sessions.get(user_id)
        if state is None:
            return None
        updated = mutator(state)
        if updated is None:
            updated = state
        self._sessions[user_id] = updated
        logger.debug("User %s %s flow now at step %s", user_id, updated.flow.value, updated.step.value)
        return updated

    def clear(self, user_id: int, flow: Optional[FlowType] = None) -> bool:
        """Empties the user's slot. With ``flow`` set, only if that flow occupies it."""
        if self.get(user_id, flow) is None:
            return False
        self._sessions.pop(user_id, None)
        return True

    def is_active(self, user_id: int, flow: Optional[FlowType] = None) -> bool:
        """True while the user is inside a flow (``flow``, if given) that awaits input."""
        return self.get(user_id, flow) is not None

    def __len__(self) -> int:
        return len(self._sessions)
