"""
Session Lifecycle

Ties the auth endpoints, the API client's bearer tokens, the persisted auth
blob and the readiness gate together.
"""

from typing import Optional

import structlog

from backoffice.api.auth import AuthApi
from backoffice.auth.gate import AuthReadinessGate
from backoffice.models import LoginResult, User

logger = structlog.get_logger(__name__)


class AuthSession:
    """
    Example:
        session = AuthSession(AuthApi(client), gate, store)
        await session.restore()
        await session.login("ops@example.com", "secret")
        await session.logout()  # gate -> not_ready, cache cleared by gate listener
    """

    def __init__(self, api: AuthApi, gate: AuthReadinessGate, store=None):
        self.api = api
        self.gate = gate
        self.store = store
        self.user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.api.client.token is not None

    async def restore(self) -> bool:
        """Rehydrate tokens from the persisted store; returns whether a session was found."""
        state = await self.store.load_auth() if self.store is not None else None

        if not state or not state.get("token") or not state.get("isAuthenticated"):
            self.gate.observe(None)
            logger.info("No persisted session")
            return False

        self.api.client.set_tokens(state["token"], state.get("refreshToken"))
        if state.get("user"):
            self.user = User.model_validate(state["user"])
        self.gate.observe(state["token"])
        logger.info("Session restored", user_id=self.user.id if self.user else None)
        return True

    async def _persist(self) -> None:
        if self.store is None:
            return
        await self.store.save_auth({
            "user": self.user.model_dump(by_alias=True) if self.user else None,
            "token": self.api.client.token,
            "refreshToken": self.api.client.refresh_token,
            "isAuthenticated": self.is_authenticated,
        })

    async def login(self, email: str, password: str) -> LoginResult:
        result = await self.api.login(email, password)
        self.user = result.user
        await self._persist()
        self.gate.observe(result.token)
        return result

    async def refresh(self) -> str:
        token = await self.api.refresh()
        await self._persist()
        self.gate.observe(token)
        return token

    async def logout(self) -> None:
        await self.api.logout()
        self.user = None
        if self.store is not None:
            await self.store.clear_auth()
        self.gate.logout()
        logger.info("Session ended")
