"""
API Client

Async HTTP client for the remote back-office REST API with bearer-token
authentication and uniform error mapping. Timeouts live here; retries are
applied by the calling query layer.
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from backoffice.api.errors import ApiException, DEFAULT_MESSAGES

logger = structlog.get_logger(__name__)


class ApiClient:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    Example:
        client = ApiClient("http://localhost:4002/cms")
        client.set_tokens(token, refresh_token)
        payload = await client.get("/platform/get", params={"pageNo": 1})
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self._token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ApiClient":
        return cls(settings.api.base_url, settings.api.timeout_seconds, transport=transport)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def set_tokens(self, token: str, refresh_token: Optional[str] = None) -> None:
        self._token = token
        if refresh_token:
            self._refresh_token = refresh_token

    def clear_tokens(self) -> None:
        self._token = None
        self._refresh_token = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._refresh_token

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _headers(self, skip_auth: bool) -> Dict[str, str]:
        if skip_auth or not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    @staticmethod
    def _error_from_response(response: httpx.Response, data: Any) -> ApiException:
        message = None
        code = None
        details = None

        if isinstance(data, str) and data:
            message = data
        elif isinstance(data, dict):
            message = data.get("message") or data.get("error")
            code = data.get("code") or data.get("error_code")
            details = data.get("errors") or data.get("details")

        if not message:
            message = DEFAULT_MESSAGES.get(response.status_code, "An unexpected error occurred")

        return ApiException(response.status_code, str(message), code, details)

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        skip_auth: bool = False,
    ) -> Any:
        """
        Issue a request and return the decoded body.

        Raises:
            ApiException: on non-2xx responses and transport failures
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(skip_auth),
            )
        except httpx.HTTPError as e:
            logger.warning("Request failed before response", method=method, url=url, error=str(e))
            raise ApiException(0, f"Request failed: {e}") from e

        if "application/json" in response.headers.get("content-type", ""):
            data = response.json()
        else:
            data = response.text

        if response.is_error:
            error = self._error_from_response(response, data)
            logger.warning(
                "Request returned error status",
                method=method,
                url=url,
                status=response.status_code,
                message=error.message,
            )
            raise error

        return data

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self.request("GET", url, params=params, **kwargs)

    async def post(self, url: str, data: Any = None, **kwargs) -> Any:
        return await self.request("POST", url, json=data, **kwargs)

    async def put(self, url: str, data: Any = None, **kwargs) -> Any:
        return await self.request("PUT", url, json=data, **kwargs)

    async def patch(self, url: str, data: Any = None, **kwargs) -> Any:
        return await self.request("PATCH", url, json=data, **kwargs)

    async def delete(self, url: str, **kwargs) -> Any:
        return await self.request("DELETE", url, **kwargs)

    async def aclose(self) -> None:
        await self._http.aclose()
