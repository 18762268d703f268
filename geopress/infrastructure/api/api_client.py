from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from geopress.application.exceptions import (
    ApiError,
    ApiUnavailableError,
    AuthenticationError,
    NotFoundError,
)
from geopress.application.ports.key_value_store import KeyValueStorePort
from geopress.core.config import settings

TOKEN_KEYS = ("geopressci_access_token", "authToken")
SESSION_KEYS = ("geopressci_access_token", "authToken", "geopressci_user")

# A 401 on these must not log the user out.
PUBLIC_ENDPOINTS = ("/available-slots", "/public/", "/pressings/", "/maps/", "/health")

DEFAULT_ERROR_MESSAGE = "Erreur lors de la communication avec le serveur"


def is_public_endpoint(path: str) -> bool:
    return any(fragment in path for fragment in PUBLIC_ENDPOINTS)


class ApiClient:
    def __init__(
        self,
        store: KeyValueStorePort,
        base_url: str | None = None,
        timeout: float | None = None,
        on_unauthorized: Callable[[], None] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._store = store
        self._base_url = (base_url or settings.GEOPRESS_API_URL).rstrip("/")
        self._on_unauthorized = on_unauthorized
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=timeout or settings.API_TIMEOUT_SECONDS,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: dict[str, Any] | None = None) -> Any:
        return self.request("POST", path, payload=payload)

    def put(self, path: str, payload: dict[str, Any] | None = None) -> Any:
        return self.request("PUT", path, payload=payload)

    def patch(self, path: str, payload: dict[str, Any] | None = None) -> Any:
        return self.request("PATCH", path, payload=payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the unwrapped `data` member of the response body."""
        headers: dict[str, str] = {}
        token = self._access_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        query = {k: _query_value(v) for k, v in (params or {}).items() if v is not None}

        try:
            response = self._client.request(method, path, params=query or None, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            self._logger.error("API request timed out", extra={"url": path, "error": str(e)})
            raise ApiUnavailableError("Le serveur ne répond pas") from e
        except httpx.HTTPError as e:
            self._logger.error("API request failed", extra={"url": path, "error": str(e)})
            raise ApiUnavailableError("Impossible de joindre le serveur") from e

        if response.status_code == 401:
            self._handle_unauthorized(path)

        if response.status_code >= 400:
            raise self._error_from(response, path)

        if response.status_code == 204 or not response.content:
            return None

        try:
            body = response.json()
        except ValueError as e:
            self._logger.error(
                "API response is not JSON",
                extra={"url": path, "status": response.status_code, "error": str(e)},
            )
            raise ApiError(
                "Réponse invalide du serveur",
                status_code=response.status_code,
                payload=response.text,
            ) from e

        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def close(self) -> None:
        self._client.close()

    def _access_token(self) -> str | None:
        for key in TOKEN_KEYS:
            token = self._store.get(key)
            if token:
                return str(token)
        return None

    def _handle_unauthorized(self, path: str) -> None:
        if is_public_endpoint(path):
            self._logger.warning("401 on public endpoint, keeping session", extra={"url": path})
            return

        self._logger.warning("Token expired for protected endpoint, clearing session", extra={"url": path})
        for key in SESSION_KEYS:
            self._store.delete(key)
        if self._on_unauthorized is not None:
            self._on_unauthorized()

    def _error_from(self, response: httpx.Response, path: str) -> ApiError:
        try:
            body = response.json()
        except ValueError:
            body = None

        server_message = None
        if isinstance(body, dict):
            server_message = body.get("message") or body.get("error") or None
        message = server_message or DEFAULT_ERROR_MESSAGE

        self._logger.error(
            "API error response",
            extra={"url": path, "status": response.status_code, "error": message},
        )

        if response.status_code == 401:
            return AuthenticationError(message, status_code=401, payload=body, server_message=server_message)
        if response.status_code == 404:
            return NotFoundError(message, status_code=404, payload=body, server_message=server_message)
        return ApiError(message, status_code=response.status_code, payload=body, server_message=server_message)


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value
