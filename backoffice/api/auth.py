"""
Authentication Endpoints
"""

from typing import Any, Dict, Optional

import structlog

from backoffice.api.client import ApiClient
from backoffice.api.errors import ApiException
from backoffice.models import LoginResult

logger = structlog.get_logger(__name__)

LOGIN_PATH = "/user/login"
LOGOUT_PATH = "/user/logout"
REFRESH_PATH = "/user/refresh"


def _normalize_user(raw: Dict[str, Any]) -> Dict[str, Any]:
    user = dict(raw)
    if "id" not in user and "_id" in user:
        user["id"] = user["_id"]
    if not user.get("name"):
        user["name"] = str(user.get("email", "")).split("@")[0]
    return user


class AuthApi:
    """Login, logout and token refresh; keeps the client's bearer tokens in sync"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def login(self, email: str, password: str) -> LoginResult:
        payload = await self.client.post(
            LOGIN_PATH,
            {"email": email, "password": password},
            skip_auth=True,
        )
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]

        result = LoginResult.model_validate({**payload, "user": _normalize_user(payload.get("user") or {})})
        self.client.set_tokens(result.token, result.refresh_token)
        logger.info("Logged in", user_id=result.user.id, role=result.user.role)
        return result

    async def logout(self) -> None:
        """Revoke the refresh token remotely; local tokens are cleared regardless."""
        refresh_token = self.client.refresh_token
        try:
            if refresh_token:
                await self.client.post(LOGOUT_PATH, {"refreshToken": refresh_token})
        except ApiException as e:
            logger.warning("Logout request failed", status=e.status, error=e.message)
        finally:
            self.client.clear_tokens()

    async def refresh(self, refresh_token: Optional[str] = None) -> str:
        """Exchange the refresh token for a new access token and return it."""
        token = refresh_token or self.client.refresh_token
        if not token:
            raise ApiException(401, "No refresh token available")

        payload = await self.client.post(REFRESH_PATH, {"refreshToken": token}, skip_auth=True)
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]

        new_token = payload.get("token") if isinstance(payload, dict) else None
        if not new_token:
            raise ApiException(401, "Token refresh failed")

        self.client.set_tokens(new_token, payload.get("refreshToken") or token)
        logger.info("Access token refreshed")
        return new_token
