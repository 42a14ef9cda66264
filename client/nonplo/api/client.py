"""HTTP client for the Nonplo backend API.

Every privileged call carries the bearer token of the current auth session.
Non-2xx responses raise ``ApiError`` with the backend's message; transport
failures raise ``NetworkError``.
"""

import logging
from typing import Any, Optional

import httpx

from nonplo.auth.session import AuthProvider
from nonplo.config import settings
from nonplo.exceptions import ApiError, NetworkError, raise_for_response

logger = logging.getLogger(__name__)


class ApiClient:
    def __init__(
        self,
        auth: AuthProvider,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.auth = auth
        self.base_url = base_url or settings.api_base_url
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.request_timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _headers(self, skip_auth: bool) -> dict[str, str]:
        if skip_auth:
            return {}
        session = await self.auth.get_session()
        if session is None:
            logger.debug("No auth session; sending request without bearer token")
            return {}
        return session.authorization_header

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[dict] = None,
        skip_auth: bool = False,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty)."""
        headers = await self._headers(skip_auth)

        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                params=params,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            logger.warning(f"{method} {path} timed out: {exc}")
            raise NetworkError("Request timeout - please try again") from exc
        except httpx.TransportError as exc:
            logger.warning(f"{method} {path} failed: {exc}")
            raise NetworkError() from exc

        raise_for_response(response)

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.error(f"{method} {path} returned a body that is not JSON")
            raise ApiError(
                message="Sunucudan geçersiz yanıt alındı",
                status_code=response.status_code,
                error_code="INVALID_RESPONSE",
            ) from exc

    async def get(self, path: str, params: Optional[dict] = None, **kwargs) -> Any:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.request("PUT", path, json=json, **kwargs)

    async def patch(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.request("PATCH", path, json=json, **kwargs)

    async def delete(self, path: str, json: Any = None, **kwargs) -> Any:
        return await self.request("DELETE", path, json=json, **kwargs)
