"""
Auth-Readiness Gate

Two-state machine (after an initial ``unknown``) that reports ``ready`` only
once an access token has been observed continuously for a settling window.
While not ready, cache and analytics fetches are suppressed rather than
failed. Logout drops straight back to ``not_ready`` and notifies listeners
(the reference cache clears itself this way).
"""

import asyncio
from enum import Enum
from typing import Callable, List, Optional

import structlog

from backoffice.api.errors import AuthenticationRequired

logger = structlog.get_logger(__name__)


class GateState(str, Enum):
    UNKNOWN = "unknown"
    NOT_READY = "not_ready"
    READY = "ready"


class AuthReadinessGate:
    """
    Example:
        gate = AuthReadinessGate(settle_seconds=0.1)
        gate.observe(token)
        await gate.wait_ready(timeout=1.0)
    """

    def __init__(self, settle_seconds: float = 0.1):
        self.settle_seconds = settle_seconds
        self._state = GateState.UNKNOWN
        self._token: Optional[str] = None
        self._settle_task: Optional[asyncio.Task] = None
        self._ready = asyncio.Event()
        self._logout_listeners: List[Callable[[], None]] = []

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is GateState.READY

    def require_ready(self) -> None:
        if not self.is_ready:
            raise AuthenticationRequired(f"Authentication not ready (state={self._state.value})")

    def add_logout_listener(self, listener: Callable[[], None]) -> None:
        self._logout_listeners.append(listener)

    def _set_state(self, state: GateState) -> None:
        if state is self._state:
            return
        logger.info("Auth gate transition", previous=self._state.value, state=state.value)
        self._state = state
        if state is GateState.READY:
            self._ready.set()
        else:
            self._ready.clear()

    def _cancel_settle(self) -> None:
        if self._settle_task is not None and not self._settle_task.done():
            self._settle_task.cancel()
        self._settle_task = None

    async def _settle(self, token: str) -> None:
        await asyncio.sleep(self.settle_seconds)
        if self._token == token:
            self._set_state(GateState.READY)

    def observe(self, token: Optional[str]) -> None:
        """
        Report the token currently held by the session.

        A new token restarts the settling window unless the gate is already
        ready (token rotation keeps it ready). A missing token moves the gate
        to ``not_ready`` immediately. Must be called from a running event loop
        when a token is given.
        """
        if token == self._token and self._state is not GateState.UNKNOWN:
            return

        self._token = token
        self._cancel_settle()

        if not token:
            self._set_state(GateState.NOT_READY)
            return

        if self._state is GateState.READY:
            return

        self._set_state(GateState.NOT_READY)
        self._settle_task = asyncio.get_running_loop().create_task(self._settle(token))

    def logout(self) -> None:
        self._token = None
        self._cancel_settle()
        self._set_state(GateState.NOT_READY)

        for listener in self._logout_listeners:
            listener()

    async def wait_ready(self, timeout: Optional[float] = None) -> bool:
        if self.is_ready:
            return True
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    def close(self) -> None:
        self._cancel_settle()
